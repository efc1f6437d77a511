"""Analysis probes for MKV Doctor.

Each probe inspects one aspect of a file through a MediaIntrospector:

- StructuralProbe: Matroska element structure
- StreamInventoryProbe: stream counts and usability
- IntegrityProbe: full decode verification
- AVSyncProbe: audio/video start offset
- DeepStreamProbe: codec profile, level and audio parameters
- TimingProbe: packet timestamps
- ContainerProbe: container tool warnings, errors and track types
- CompatibilityProbe: properties older players handle poorly
- StressProbe: seek and decode at several positions
"""

from mkvdoctor.probes.base import Probe, ProbeContext, ProbeRecorder
from mkvdoctor.probes.compatibility import CompatibilityProbe
from mkvdoctor.probes.container import ContainerProbe
from mkvdoctor.probes.deep_stream import DeepStreamProbe
from mkvdoctor.probes.integrity import IntegrityProbe
from mkvdoctor.probes.streams import StreamInventoryProbe
from mkvdoctor.probes.stress import StressProbe
from mkvdoctor.probes.structural import StructuralProbe
from mkvdoctor.probes.sync import AVSyncProbe
from mkvdoctor.probes.timing import TimingProbe

__all__ = [
    # Base
    "Probe",
    "ProbeContext",
    "ProbeRecorder",
    # Probes
    "AVSyncProbe",
    "CompatibilityProbe",
    "ContainerProbe",
    "DeepStreamProbe",
    "IntegrityProbe",
    "StreamInventoryProbe",
    "StressProbe",
    "StructuralProbe",
    "TimingProbe",
]
