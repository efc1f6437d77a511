"""Matroska structure probe."""

from mkvdoctor.domain.media import MediaFile
from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder


class StructuralProbe(Probe):
    """Checks for the EBML header, segment, tracks and cluster elements."""

    name = "structural"
    description = "Matroska element structure"

    def check(
        self, media: MediaFile, context: ProbeContext, rec: ProbeRecorder
    ) -> None:
        structure = context.introspector.get_container_structure(
            media, timeout=context.timeout("metadata")
        )
        for line in structure.structure_lines:
            rec.note(line)
        for element in structure.elements.missing():
            rec.warning(f"Missing {element}")
