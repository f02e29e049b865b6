"""Client for the REST alignment service.

Coordinates are sent in batches; each response body is decoded by content
sniffing into a tagged DecodeSuccess or DecodeFailure. A failure in any
batch fails the whole translation, so callers never see partial results.
"""

from __future__ import annotations

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from constants import Constants
from common import http_client
from common.errors import AlignmentServiceError, InvalidProtocolError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from versioning.models import AlignmentResult, AlignmentValue, Coordinate

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<.*?>", re.DOTALL)


class RestProtocol(Enum):
    """Request protocol variants understood by the service."""
    CURRENT = "current"

    @classmethod
    def parse(cls, name: str) -> "RestProtocol":
        """Map a configured protocol name to a member.

        Raises:
            InvalidProtocolError: If the name is not a known protocol.
        """
        for protocol in cls:
            if protocol.value == name:
                return protocol
        raise InvalidProtocolError(f"Unknown protocol {name}")


@dataclass
class DecodeSuccess:
    """A response body that decoded into alignment values."""
    result: AlignmentResult


@dataclass
class DecodeFailure:
    """A response body that carried an error (or nothing usable)."""
    reason: str


DecodeOutcome = Union[DecodeSuccess, DecodeFailure]


def _describe_error_object(obj: Dict[str, Any]) -> str:
    error_type = obj.get("errorType")
    message = obj.get("errorMessage") or obj.get("message")
    details = obj.get("details")
    if error_type is None and message is None and details is None:
        return f"Alignment service returned an error object: {json.dumps(obj, sort_keys=True)}"
    parts = []
    if error_type:
        parts.append(f"({error_type})")
    if message:
        parts.append(str(message))
    if details:
        parts.append(f"[{details}]")
    return " ".join(parts)


def _decode_entry(entry: Any) -> Optional[tuple]:
    if not isinstance(entry, dict):
        return None
    group_id = entry.get("groupId")
    artifact_id = entry.get("artifactId")
    version = entry.get("version")
    if not all(isinstance(v, str) and v for v in (group_id, artifact_id, version)):
        return None
    best_match = entry.get("bestMatchVersion")
    if best_match is not None and not isinstance(best_match, str):
        return None
    available = entry.get("availableVersions") or []
    if not isinstance(available, list) or not all(isinstance(v, str) for v in available):
        return None
    return Coordinate(group_id, artifact_id, version), AlignmentValue(best_match or None, list(available))


def decode_response(body: Optional[str]) -> DecodeOutcome:
    """Decode an alignment service response body.

    Priority: empty body, HTML page, JSON error object, JSON array of GAVs.
    """
    if body is None or not body.strip():
        return DecodeFailure("No content to read.")

    text = body.strip()
    if text.startswith("<"):
        stripped = " ".join(_TAG_RE.sub(" ", text).split())
        logger.debug("Read HTML string rather than a JSON stream; stripped message to '%s'", stripped)
        return DecodeFailure(stripped or "Alignment service returned an empty HTML document")

    try:
        parsed = json.loads(text)
    except ValueError as e:
        logger.error("Failed to decode response body: %.200s", text)
        return DecodeFailure(f"Failed to read list-of-maps response from version server: {e}")

    if isinstance(parsed, dict):
        return DecodeFailure(_describe_error_object(parsed))
    if not isinstance(parsed, list):
        return DecodeFailure(
            f"Unexpected response from version server: expected a list, got {type(parsed).__name__}"
        )

    result: AlignmentResult = {}
    for index, entry in enumerate(parsed):
        decoded = _decode_entry(entry)
        if decoded is None:
            return DecodeFailure(f"Malformed entry {index} in version server response: {entry!r}")
        coordinate, value = decoded
        result[coordinate] = value
    return DecodeSuccess(result)


def encode_request(
    coordinates: Iterable[Coordinate],
    protocol: RestProtocol,
    repository_group: str,
    version_suffix: str,
) -> str:
    """Serialize a batch request body."""
    if protocol is not RestProtocol.CURRENT:
        raise InvalidProtocolError(f"Unknown protocol value {protocol}")
    return json.dumps({
        "repositoryGroup": repository_group,
        "versionSuffix": version_suffix,
        "gavs": [c.to_dict() for c in coordinates],
    })


def split_batches(coordinates: List[Coordinate], size: int) -> List[List[Coordinate]]:
    """Split into consecutive batches of at most ``size`` coordinates."""
    if size < 1:
        raise ValueError("batch size must be positive")
    return [coordinates[i:i + size] for i in range(0, len(coordinates), size)]


class AlignmentServiceClient:
    """Translates coordinates into best-match versions via the REST service."""

    def __init__(
        self,
        base_url: str,
        repository_group: str,
        version_suffix: str,
        protocol: str = Constants.REST_PROTOCOL,
        timeout: float = Constants.REQUEST_TIMEOUT,
        chunk_size: int = Constants.CHUNK_SPLIT_COUNT,
    ):
        """Initialize the client.

        Args:
            base_url: Service base URL, e.g. ``http://host/da/rest/v-1``.
            repository_group: Repository group the service searches.
            version_suffix: Suffix used by the service to pick candidates.
            protocol: Request protocol name; only ``current`` is supported.
            timeout: Per-request timeout in seconds.
            chunk_size: Maximum coordinates per batch and worker bound.

        Raises:
            InvalidProtocolError: If ``protocol`` is not supported.
        """
        self._protocol = RestProtocol.parse(protocol)
        self._url = base_url.rstrip("/") + Constants.DA_LOOKUP_PATH
        self._repository_group = repository_group
        self._version_suffix = version_suffix
        self._timeout = timeout
        self._chunk_size = chunk_size

    @property
    def url(self) -> str:
        return self._url

    def translate_versions(self, coordinates: Iterable[Coordinate]) -> AlignmentResult:
        """Ask the service for best-match versions of ``coordinates``.

        Raises:
            AlignmentServiceError: If any batch fails; no partial result is returned.
        """
        unique = sorted(set(coordinates))
        if not unique:
            return {}
        batches = split_batches(unique, self._chunk_size)
        logger.info(
            "Calling REST client with %d batches of up to %d GAVs at %s",
            len(batches), self._chunk_size, safe_url(self._url),
        )

        failures: List[AlignmentServiceError] = []
        merged: AlignmentResult = {}
        with Timer() as t:
            with ThreadPoolExecutor(max_workers=min(len(batches), self._chunk_size)) as executor:
                futures = [
                    executor.submit(self._translate_batch, index, len(batches), batch)
                    for index, batch in enumerate(batches, start=1)
                ]
                for future in futures:
                    try:
                        merged.update(future.result())
                    except AlignmentServiceError as e:
                        failures.append(e)

        if failures:
            raise AlignmentServiceError(
                f"{len(failures)} of {len(batches)} alignment batches failed: {failures[0]}"
            ) from failures[0]

        if is_debug_enabled(logger):
            logger.debug(
                "Alignment translation complete",
                extra=extra_context(
                    event="translate",
                    component="translator",
                    outcome="success",
                    requested=len(unique),
                    returned=len(merged),
                    duration_ms=t.duration_ms(),
                )
            )
        return merged

    def _translate_batch(self, index: int, total: int, batch: List[Coordinate]) -> AlignmentResult:
        context = f"alignment batch {index}/{total}"
        body = encode_request(batch, self._protocol, self._repository_group, self._version_suffix)
        res = http_client.safe_post(
            self._url,
            context=context,
            data=body,
            timeout=self._timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        outcome = decode_response(res.text)
        if isinstance(outcome, DecodeFailure):
            logger.error("%s failed with status %s: %s", context, res.status_code, outcome.reason)
            raise AlignmentServiceError(
                f"{context} failed with status {res.status_code}: {outcome.reason}"
            )
        if not 200 <= res.status_code < 300:
            raise AlignmentServiceError(f"{context} failed with status {res.status_code}")
        return outcome.result
