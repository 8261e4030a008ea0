"""Scripted exercise of an object storage account.

The probe lists a bucket, then uploads a local file under its own name,
fetches its metadata and deletes it again. Only the listing is fatal; the
outcome of each later step is recorded and the sequence carries on.

Running two probes against the same bucket and file name at once is not
coordinated in any way; their steps may interleave.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from s3_probe.core import get_logger, settings
from s3_probe.core.exceptions import S3ProbeError
from s3_probe.objectstorage import ObjectMetadata, ObjectStore, ObjectSummary

logger = get_logger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Result of one upload, head or delete step."""

    step: str
    key: str
    metadata: Optional[ObjectMetadata] = None
    error: Optional[S3ProbeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe(self) -> str:
        if self.error is not None:
            return f"{type(self.error).__name__}: {self.error}"
        if self.metadata is not None:
            return f"Success: {self.metadata}"
        return "Success"


@dataclass
class ProbeReport:
    """Everything a probe run observed."""

    bucket: str
    objects: list[ObjectSummary] = field(default_factory=list)
    steps: list[StepOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(step.ok for step in self.steps)


def run_probe(
    store: ObjectStore,
    bucket: str,
    filename: Optional[str] = None,
    source_path: Optional[Union[str, Path]] = None,
    on_listing: Optional[Callable[[list[ObjectSummary]], None]] = None,
    on_progress: Optional[Callable[[str], None]] = None,
    on_outcome: Optional[Callable[[StepOutcome], None]] = None,
) -> ProbeReport:
    """Run the list, upload, head, delete sequence.

    Args:
        store: Object store to exercise
        bucket: Bucket name
        filename: Object key, and local file name unless ``source_path`` is
            given (default: ``settings.probe_filename``)
        source_path: Local file to upload
        on_listing: Called with the bucket listing once it succeeds
        on_progress: Called with a progress line before each step
        on_outcome: Called with each step's outcome as soon as it is known

    Returns:
        Report with the listing and the outcome of each step

    Raises:
        S3ProbeError: If the bucket listing fails
    """
    key = filename or settings.probe_filename
    source = source_path if source_path is not None else key
    progress = on_progress or (lambda line: None)

    logger.info("Starting probe", bucket=bucket, key=key)

    objects = store.list_objects(bucket)
    report = ProbeReport(bucket=bucket, objects=objects)
    if on_listing is not None:
        on_listing(objects)

    def record(outcome: StepOutcome) -> None:
        report.steps.append(outcome)
        if outcome.ok:
            logger.info("Probe step succeeded", step=outcome.step, key=key)
        else:
            logger.warning(
                "Probe step failed", step=outcome.step, key=key, error=str(outcome.error)
            )
        if on_outcome is not None:
            on_outcome(outcome)

    progress(f"Uploading {key}")
    try:
        metadata = store.put_file(bucket, key, source)
        record(StepOutcome("upload", key, metadata=metadata))
    except S3ProbeError as e:
        record(StepOutcome("upload", key, error=e))

    progress(f"HEAD {key}")
    try:
        metadata = store.head_object(bucket, key)
        record(StepOutcome("head", key, metadata=metadata))
    except S3ProbeError as e:
        record(StepOutcome("head", key, error=e))

    progress(f"DELETE {key}")
    try:
        store.delete_object(bucket, key)
        record(StepOutcome("delete", key))
    except S3ProbeError as e:
        record(StepOutcome("delete", key, error=e))

    logger.info("Probe finished", bucket=bucket, key=key, ok=report.ok)
    return report
