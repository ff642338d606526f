"""
Decoding (JSON -> records).

The portal wraps its list payloads in several envelope shapes and encodes
field values in ways that differ from field to field. This module turns all of
that into the records of learnhelper.model.

Envelopes:
    {"resultList": [...]}
    {"object": {"aaData": [...]}}
    {"object": {"resultsList": [...]}}
    {"object": [...]}
    [...]                      (bare array; nulls are dropped)

Field transforms are plain functions of the raw JSON value (None when the key
is missing). They raise ValueError / TypeError on bad input; the record
builders turn that into a DecodeError naming the field and the raw value.
A bad field fails its own record only: decode_records() keeps going with the
siblings and hands back the failures next to the records that decoded.
"""

from __future__ import annotations

import base64
import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar, Union

from learnhelper.errors import DecodeError
from learnhelper.model import (
    Course,
    Discussion,
    DiscussionBase,
    File,
    Homework,
    Notification,
    Question,
)

T = TypeVar("T")

MINUTE_FORMAT = "%Y-%m-%d %H:%M"
SECOND_FORMAT = "%Y-%m-%d %H:%M:%S"

# The portal's "yes" for read flags.
YES_TOKEN = "是"


# ---------------------------------------------------------------------------
# Response bodies & envelopes
# ---------------------------------------------------------------------------


def load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError("<body>", text[:200], str(exc)) from exc


def unwrap(payload: Any) -> List[Any]:
    """
    Return the item list of any known envelope shape.

    A bare array is returned with its null entries removed. Anything else
    raises DecodeError("<envelope>", payload).
    """
    if isinstance(payload, list):
        return [x for x in payload if x is not None]

    if isinstance(payload, dict):
        if isinstance(payload.get("resultList"), list):
            return payload["resultList"]

        obj = payload.get("object")
        if isinstance(obj, list):
            return obj
        if isinstance(obj, dict):
            for key in ("aaData", "resultsList"):
                if isinstance(obj.get(key), list):
                    return obj[key]

    raise DecodeError("<envelope>", payload, "unknown envelope shape")


def semester_ids(payload: Any) -> List[str]:
    if not isinstance(payload, list):
        raise DecodeError("<envelope>", payload, "expected an array of semester ids")
    out: List[str] = []
    for x in payload:
        if x is None:
            continue
        try:
            out.append(text(x))
        except (TypeError, ValueError) as exc:
            raise DecodeError("<semester>", x, str(exc)) from exc
    return out


# ---------------------------------------------------------------------------
# Field transforms
# ---------------------------------------------------------------------------


def text(raw: Any) -> str:
    """Required text. Bare numbers are accepted and kept as their text."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    raise TypeError(f"expected a string, got {type(raw).__name__}")


def nonempty(raw: Any) -> Optional[str]:
    # empty string and null both mean absent
    if raw is None or raw == "":
        return None
    return text(raw)


def parse_datetime(raw: Any, fmt: str) -> datetime:
    if not isinstance(raw, str):
        raise TypeError(f"expected a datetime string, got {type(raw).__name__}")
    return datetime.strptime(raw, fmt)


def minute_datetime(raw: Any) -> datetime:
    return parse_datetime(raw, MINUTE_FORMAT)


def second_datetime(raw: Any) -> datetime:
    return parse_datetime(raw, SECOND_FORMAT)


def optional_minute_datetime(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    return parse_datetime(raw, MINUTE_FORMAT)


def optional_second_datetime(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    return parse_datetime(raw, SECOND_FORMAT)


def yes_bool(raw: Any) -> bool:
    return text(raw) == YES_TOKEN


def one_bool(raw: Any) -> bool:
    return text(raw) == "1"


def int_bool(raw: Any) -> bool:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise TypeError(f"expected an integer, got {raw!r}")
    return raw != 0


def base64_text(raw: Any) -> str:
    """Base64, then UTF-8. A missing value decodes as ""."""
    s = "" if raw is None else text(raw)
    return base64.b64decode(s, validate=True).decode("utf-8")


def to_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise TypeError("expected an integer, got a boolean")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        return int(raw.strip())
    raise TypeError(f"expected an integer, got {type(raw).__name__}")


def int_or_raw(raw: Any) -> Union[int, str]:
    """Numeric field sent as text; values that are not integers are kept verbatim."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    s = text(raw)
    try:
        return int(s)
    except ValueError:
        return s


def optional_float(raw: Any) -> Optional[float]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise TypeError("expected a number, got a boolean")
    if isinstance(raw, (int, float)):
        return float(raw)
    return float(text(raw))


def string_list(raw: Any) -> Tuple[str, ...]:
    if not isinstance(raw, list):
        raise TypeError(f"expected an array, got {type(raw).__name__}")
    return tuple(text(x) for x in raw if x is not None)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def _record(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise DecodeError("<record>", raw, "expected a JSON object")
    return raw


def _field(obj: Dict[str, Any], key: str, transform: Callable[[Any], T]) -> T:
    raw = obj.get(key)
    try:
        return transform(raw)
    except (ValueError, TypeError) as exc:
        raise DecodeError(key, raw, str(exc)) from exc


def course_from_json(raw: Any) -> Course:
    obj = _record(raw)
    return Course(
        id=_field(obj, "wlkcid", text),
        name=_field(obj, "kcm", text),
        english_name=_field(obj, "ywkcm", text),
        teacher_name=_field(obj, "jsm", text),
        teacher_number=_field(obj, "jsh", text),
        course_number=_field(obj, "kch", text),
        course_index=_field(obj, "kxh", int_or_raw),
    )


def notification_from_json(raw: Any) -> Notification:
    obj = _record(raw)
    return Notification(
        course_id=_field(obj, "wlkcid", text),
        id=_field(obj, "ggid", text),
        title=_field(obj, "bt", text),
        content=_field(obj, "ggnr", base64_text),
        read=_field(obj, "sfyd", yes_bool),
        important=_field(obj, "sfqd", one_bool),
        publish_time=_field(obj, "fbsjStr", minute_datetime),
        publisher=_field(obj, "fbrxm", text),
        attachment_name=_field(obj, "fjmc", nonempty),
    )


def file_from_json(raw: Any) -> File:
    obj = _record(raw)
    return File(
        id=_field(obj, "wjid", text),
        title=_field(obj, "bt", text),
        description=_field(obj, "ms", text),
        raw_size=_field(obj, "wjdx", to_int),
        size=_field(obj, "fileSize", text),
        upload_time=_field(obj, "scsj", minute_datetime),
        new=_field(obj, "isNew", int_bool),
        important=_field(obj, "sfqd", int_bool),
        visit_count=_field(obj, "llcs", to_int),
        download_count=_field(obj, "xzcs", to_int),
        file_type=_field(obj, "wjlx", text),
    )


def homework_from_json(raw: Any) -> Homework:
    obj = _record(raw)
    return Homework(
        course_id=_field(obj, "wlkcid", text),
        id=_field(obj, "zyid", text),
        student_homework_id=_field(obj, "xszyid", text),
        title=_field(obj, "bt", text),
        assign_time=_field(obj, "kssjStr", minute_datetime),
        deadline=_field(obj, "jzsjStr", minute_datetime),
        submit_time=_field(obj, "scsjStr", optional_minute_datetime),
        submit_content=_field(obj, "zynrStr", nonempty),
        grade=_field(obj, "cj", optional_float),
        grade_time=_field(obj, "pysjStr", optional_minute_datetime),
        grader_name=_field(obj, "jsm", nonempty),
        grade_content=_field(obj, "pynr", nonempty),
    )


def discussion_base_from_json(raw: Any) -> DiscussionBase:
    obj = _record(raw)
    return DiscussionBase(
        id=_field(obj, "id", text),
        title=_field(obj, "bt", text),
        publisher_name=_field(obj, "fbrxm", text),
        publish_time=_field(obj, "fbsj", second_datetime),
        last_replier_name=_field(obj, "zhhfrxm", nonempty),
        last_reply_time=_field(obj, "zhhfsj", optional_second_datetime),
        visit_count=_field(obj, "djs", to_int),
        reply_count=_field(obj, "hfcs", to_int),
    )


def discussion_from_json(raw: Any) -> Discussion:
    base = discussion_base_from_json(raw)
    return Discussion(base=base, board_id=_field(raw, "bqid", text))


def question_from_json(raw: Any) -> Question:
    base = discussion_base_from_json(raw)
    return Question(base=base, question=_field(raw, "wtnr", base64_text))


def decode_records(items: List[Any], builder: Callable[[Any], T]) -> Tuple[List[T], List[DecodeError]]:
    """
    Build one record per item.

    Items that fail are left out of the first list; their errors are
    returned in the second list, in the same order as the items.
    """
    records: List[T] = []
    failures: List[DecodeError] = []
    for item in items:
        try:
            records.append(builder(item))
        except DecodeError as exc:
            failures.append(exc)
    return records, failures
