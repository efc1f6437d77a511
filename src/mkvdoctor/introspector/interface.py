"""MediaIntrospector interface for media analysis."""

from typing import Protocol

from mkvdoctor.domain.media import (
    ContainerMeta,
    ContainerStructure,
    DecodeVerdict,
    FormatInfo,
    MediaFile,
    PacketInfo,
    PacketQuery,
    StreamInfo,
)


class MediaIntrospectionError(Exception):
    """Raised when an external tool cannot be invoked or its output parsed.

    Probes convert this into a Warning finding; it never terminates a run.
    """

    pass


class MediaIntrospector(Protocol):
    """Protocol for media introspection implementations.

    Wraps the external media probe tool, the decoder, and the container
    metadata tools, returning typed structures. Every method accepts an
    optional timeout in seconds (None = no limit).
    """

    def get_format_info(
        self, media: MediaFile, timeout: float | None = None
    ) -> FormatInfo:
        """Container duration, size and tags.

        Raises:
            MediaIntrospectionError: If the file cannot be probed.
        """
        ...

    def get_streams(
        self, media: MediaFile, timeout: float | None = None
    ) -> list[StreamInfo]:
        """Elementary streams in index order.

        Raises:
            MediaIntrospectionError: If the file cannot be probed.
        """
        ...

    def get_packets(
        self,
        media: MediaFile,
        query: PacketQuery | None = None,
        timeout: float | None = None,
    ) -> list[PacketInfo]:
        """Packet timing samples in file order.

        Raises:
            MediaIntrospectionError: If the file cannot be probed.
        """
        ...

    def verify_decode(
        self, media: MediaFile, timeout: float | None = None
    ) -> DecodeVerdict:
        """Decode the whole file and classify any diagnostics.

        Raises:
            MediaIntrospectionError: If the decoder cannot be invoked.
        """
        ...

    def get_container_structure(
        self, media: MediaFile, timeout: float | None = None
    ) -> ContainerStructure:
        """Matroska element flags and the leading mkvinfo lines.

        Raises:
            MediaIntrospectionError: If mkvinfo cannot be invoked.
        """
        ...

    def get_container_meta(
        self, media: MediaFile, timeout: float | None = None
    ) -> ContainerMeta:
        """Track summaries, tool warnings and errors from mkvmerge.

        Raises:
            MediaIntrospectionError: If mkvmerge cannot be invoked or its
                output cannot be parsed.
        """
        ...

    def seek_and_decode(
        self,
        media: MediaFile,
        position: float,
        duration: float,
        timeout: float | None = None,
    ) -> bool:
        """Seek to ``position`` and decode ``duration`` seconds.

        Returns:
            True if the decoder exited cleanly.

        Raises:
            MediaIntrospectionError: If the decoder cannot be invoked.
        """
        ...
