"""
Image batch processor — runs every candidate image through the staged
upload client and classifies the result.

One outcome per input, in input order. A failing image never aborts the
batch and nothing is raised from process().
"""
import logging
from typing import List, Sequence

from vendor_hub.core.exceptions import InvalidSource
from vendor_hub.schemas.credentials import CredentialLease
from vendor_hub.schemas.publishing import (
    Failed,
    ImageReference,
    Skipped,
    Uploaded,
    UploadOutcome,
)
from vendor_hub.services.staged_upload import StagedUploadClient

logger = logging.getLogger("image_batch")


class ImageBatchProcessor:
    def __init__(self, uploader: StagedUploadClient) -> None:
        self._uploader = uploader

    async def process(
        self, candidates: Sequence[ImageReference], lease: CredentialLease
    ) -> List[UploadOutcome]:
        outcomes: List[UploadOutcome] = []
        for ref in candidates:
            try:
                resource_uri = await self._uploader.upload(ref.source_uri, lease)
            except InvalidSource as exc:
                logger.info(
                    "image skipped index=%s uri=%s reason=%s",
                    ref.ordinal_index, ref.source_uri, exc,
                )
                outcomes.append(Skipped(source=ref, reason=str(exc)))
            except Exception as exc:
                logger.warning(
                    "image upload failed index=%s uri=%s error=%s",
                    ref.ordinal_index, ref.source_uri, exc,
                )
                outcomes.append(Failed(source=ref, error=str(exc) or type(exc).__name__))
            else:
                outcomes.append(Uploaded(source=ref, platform_resource_uri=resource_uri))

        uploaded = sum(1 for o in outcomes if isinstance(o, Uploaded))
        if candidates:
            logger.info(
                "image batch done total=%s uploaded=%s skipped=%s failed=%s",
                len(candidates),
                uploaded,
                sum(1 for o in outcomes if isinstance(o, Skipped)),
                sum(1 for o in outcomes if isinstance(o, Failed)),
            )
        return outcomes
