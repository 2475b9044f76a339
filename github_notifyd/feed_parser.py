"""Decoding and validation of the GitHub notifications payload."""

import json
import logging
from typing import Any, List, Union

from .errors import MalformedFeed
from .models import PartialRecord, Rejected

logger = logging.getLogger(__name__)


def _required_str(obj: dict, key: str, path: str) -> Union[str, Rejected]:
    value = obj.get(key)
    if not isinstance(value, str) or not value:
        return Rejected(f"missing or invalid '{path}'")
    return value


def _required_obj(obj: dict, key: str) -> Union[dict, Rejected]:
    value = obj.get(key)
    if not isinstance(value, dict):
        return Rejected(f"missing or invalid '{key}' object")
    return value


def parse_record(element: Any) -> Union[PartialRecord, Rejected]:
    """
    Validate one element of the notifications array.

    Fields are read in a fixed order and the first one that is missing,
    empty or of the wrong type rejects the element.

    Args:
        element: One decoded array element.

    Returns:
        A PartialRecord, or Rejected naming the offending field.
    """
    if not isinstance(element, dict):
        return Rejected("element is not an object")

    reason = _required_str(element, "reason", "reason")
    if isinstance(reason, Rejected):
        return reason

    subject = _required_obj(element, "subject")
    if isinstance(subject, Rejected):
        return subject

    subject_type = _required_str(subject, "type", "subject.type")
    if isinstance(subject_type, Rejected):
        return subject_type

    title = _required_str(subject, "title", "subject.title")
    if isinstance(title, Rejected):
        return title

    repository = _required_obj(element, "repository")
    if isinstance(repository, Rejected):
        return repository

    repository_name = _required_str(repository, "name", "repository.name")
    if isinstance(repository_name, Rejected):
        return repository_name

    repository_url = _required_str(repository, "html_url", "repository.html_url")
    if isinstance(repository_url, Rejected):
        return repository_url

    # Needed to look up the author; GitHub sends null for some subject kinds.
    comment_url = _required_str(subject, "latest_comment_url", "subject.latest_comment_url")
    if isinstance(comment_url, Rejected):
        return comment_url

    return PartialRecord(
        reason=reason,
        type=subject_type,
        title=title,
        repository_name=repository_name,
        repository_url=repository_url,
        comment_url=comment_url,
    )


def decode_json(body: bytes) -> Any:
    """
    Decode a JSON response body.

    Raises:
        ValueError: If the body is not valid UTF-8 JSON or nests too deeply.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    try:
        return json.loads(body)
    except RecursionError as e:
        raise ValueError("document nested too deeply") from e


def parse_feed(body: bytes) -> List[PartialRecord]:
    """
    Decode the notifications payload into validated records.

    A malformed element is logged and skipped; it never invalidates the rest
    of the batch. Array order is preserved.

    Raises:
        MalformedFeed: If the body is not JSON or its root is not an array.
    """
    try:
        root = decode_json(body)
    except ValueError as e:
        raise MalformedFeed(f"JSON error: {e}") from e

    if not isinstance(root, list):
        raise MalformedFeed("JSON error: root is not an array")

    records = []
    for index, element in enumerate(root):
        result = parse_record(element)
        if isinstance(result, Rejected):
            logger.warning(f"Skipping invalid notification #{index}: {result.reason}")
            continue
        records.append(result)

    logger.info(f"Decoded {len(records)} of {len(root)} notifications")
    return records
