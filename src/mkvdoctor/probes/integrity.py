"""Full-decode integrity probe."""

import logging

from mkvdoctor.domain.media import MediaFile
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder

logger = logging.getLogger(__name__)

# Decoder output lines kept for verbose output
MAX_DIAGNOSTIC_LINES = 20


class IntegrityProbe(Probe):
    """Decodes the whole file and classifies decoder diagnostics.

    Also used by the repair executor to verify a repaired file.
    """

    name = "integrity"
    description = "Full decode verification"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        verdict = context.introspector.verify_decode(
            media, timeout=context.timeout("decode")
        )
        for line in verdict.diagnostic_text.splitlines()[:MAX_DIAGNOSTIC_LINES]:
            rec.note(line)
        if verdict.ok:
            return

        logger.info("Decode errors in %s", media.path)
        rec.error("File integrity check failed")
        for signature in verdict.signatures:
            rec.warning(signature.value)
