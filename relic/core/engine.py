"""
Relic Decode Engine
====================

Orchestrates the decode pipeline for one serialization stream:

    1. Read the file and compute hashes (MD5, SHA-256)
    2. Decode the stream (header, content, class descriptors)
    3. Reconnect nested member classes (optional, on by default)
    4. Normalize the top-level objects
    5. Render class descriptors as pseudo-source
    6. Summarise everything into a :class:`DecodeReport`

Decoding is synchronous and single-pass; :meth:`RelicEngine.analyze`
only moves the file read and the pipeline off the event loop.
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from shared.config import RelicConfig
from shared.logger import RelicLogger

from relic.analyzers.member_classes import connect_member_classes
from relic.analyzers.normalizer import normalize
from relic.core.constants import STREAM_VERSION
from relic.core.content import ClassDescription, Content
from relic.core.errors import RelicError
from relic.core.models import ClassSummary, DecodeReport, StreamInfo
from relic.output.printer import print_classes
from relic.parsers.stream_parser import StreamParser


@dataclass(slots=True)
class DeserializationResult:
    """Output of one decode session.

    Attributes:
        objects: Non-null top-level content items, in stream order.
        classes: Every class descriptor decoded, superclasses first.
        renamed_classes: Renames applied by the member-class reconnector.
        handles_assigned: Handles live in the table when decoding ended.
        resets: Handle-table resets performed during decoding.
    """
    objects: list[Content]
    classes: list[ClassDescription]
    renamed_classes: dict[str, str] = field(default_factory=dict)
    handles_assigned: int = 0
    resets: int = 0


def deserialize(data: bytes, connect: bool = True) -> DeserializationResult:
    """Decode a complete serialization stream.

    Args:
        data: The stream bytes, starting with the ``0xACED 0x0005`` header.
        connect: Run the member-class reconnector after decoding.

    Returns:
        The decoded objects and class descriptors.

    Raises:
        RelicError: If the stream is malformed or uses an unsupported form.
    """
    parser = StreamParser(data)
    objects = parser.parse()
    renames: dict[str, str] = {}
    if connect:
        renames = connect_member_classes(parser.class_descriptions)
    return DeserializationResult(
        objects=objects,
        classes=parser.class_descriptions,
        renamed_classes=renames,
        handles_assigned=len(parser.handles),
        resets=parser.reset_count,
    )


class RelicEngine:
    """Runs the full decode pipeline and builds reports.

    Usage::

        engine = RelicEngine()
        report = await engine.analyze("/path/to/stream.ser")

    Or synchronously::

        report = engine.analyze_sync("/path/to/stream.ser")
        result = engine.decode(raw_bytes)
    """

    def __init__(
        self,
        config: RelicConfig | None = None,
        logger: RelicLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Relic configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: RelicConfig = config or RelicConfig()
        self._logger: RelicLogger = logger or RelicLogger("engine")

    @property
    def config(self) -> RelicConfig:
        return self._config

    # ------------------------------------------------------------------ #
    #  Decoding
    # ------------------------------------------------------------------ #

    def decode(self, data: bytes) -> DeserializationResult:
        """Decode *data*, reconnecting member classes if configured.

        Failures are logged with their traceback and re-raised unchanged.
        """
        connect = self._config.relic.connect_member_classes
        with self._logger.operation("decode"):
            self._logger.debug("Decoding %d byte stream", len(data))
            try:
                result = deserialize(data, connect=connect)
            except RelicError as exc:
                self._logger.exception("Stream decode failed: %s", exc)
                raise

            self._logger.info(
                "Decoded %d top-level object(s), %d class description(s)",
                len(result.objects),
                len(result.classes),
                handles=result.handles_assigned,
                resets=result.resets,
            )
            for old_name, new_name in result.renamed_classes.items():
                self._logger.debug("Reconnected member class %s -> %s", old_name, new_name)
        return result

    def analyze_data(self, data: bytes, file_path: str = "<memory>") -> DecodeReport:
        """Decode in-memory *data* and summarise it.

        Args:
            data: Raw stream bytes.
            file_path: Display path for the report.

        Returns:
            A populated :class:`DecodeReport`.
        """
        started = time.perf_counter()
        with self._logger.timed(f"decode of {file_path}"):
            result = self.decode(data)

        with self._logger.operation("normalize"):
            values = normalize(result.objects)

        report = DecodeReport(
            stream=StreamInfo(
                path=file_path,
                size=len(data),
                md5=hashlib.md5(data).hexdigest(),
                sha256=hashlib.sha256(data).hexdigest(),
                version=STREAM_VERSION,
                handles_assigned=result.handles_assigned,
                resets=result.resets,
            ),
            objects=values,
            object_kinds=dict(Counter(obj.kind for obj in result.objects)),
            classes=[ClassSummary.from_description(cd) for cd in result.classes],
            renamed_classes=result.renamed_classes,
            class_source=print_classes(
                result.classes, indent_width=self._config.relic.indent_width
            ),
        )
        report.duration_seconds = time.perf_counter() - started
        return report

    async def analyze(self, file_path: str) -> DecodeReport:
        """Load *file_path* and run :meth:`analyze_data` off the event loop.

        Raises:
            FileNotFoundError: If the file does not exist.
            RelicError: If the file exceeds ``max_stream_size`` or fails
                to decode.
        """
        path = Path(file_path)
        if not path.is_file():
            self._logger.error("File not found: %s", file_path)
            raise FileNotFoundError(f"File not found: {file_path}")

        size = path.stat().st_size
        max_size = self._config.relic.max_stream_size
        if size > max_size:
            message = f"Stream too large: {size:,} bytes (max: {max_size:,} bytes)"
            self._logger.error(message)
            raise RelicError(message)

        self._logger.info("Starting decode of %s", path)
        data = path.read_bytes()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self.analyze_data, data, str(path.resolve())
        )

    def analyze_sync(self, file_path: str) -> DecodeReport:
        """Synchronous wrapper around :meth:`analyze`."""
        return asyncio.run(self.analyze(file_path))
