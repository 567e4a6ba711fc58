"""
Argument and package-metadata validation.

Every check here runs before any filesystem access. Absent or empty values
raise MissingArgumentError (or InvalidRecordError for metadata fields);
values of the wrong type raise ArgumentTypeError (or RecordTypeError).
"""
from __future__ import annotations

import os
from typing import Any, Dict, Optional

from dltracker.core.errors import (
    ArgumentTypeError,
    InvalidRecordError,
    MissingArgumentError,
    RecordTypeError,
    UnrecognizedTypeError,
)
from dltracker.domain.filename_utils import RE_HEX40
from dltracker.domain.models import DL_TYPES, TrackerOptions

LOGGER_METHODS = ("error", "warning", "info", "debug")


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def expect_nonempty_string(value: Any, value_name: str) -> None:
    if _is_empty(value):
        raise MissingArgumentError(f"package {value_name} required")
    if not isinstance(value, str):
        raise ArgumentTypeError(f"package {value_name} must be given as a string")


def expect_dl_type(value: Any) -> None:
    if _is_empty(value):
        raise MissingArgumentError("package type required")
    if not isinstance(value, str):
        raise ArgumentTypeError("package type must be given as a string")
    if value not in DL_TYPES:
        raise UnrecognizedTypeError(f'given package type "{value}" unrecognized')


def expect_path(value: Any) -> None:
    if value is None or isinstance(value, (str, os.PathLike)):
        return
    raise ArgumentTypeError("path must be given as a string")


def expect_logger(log: Any) -> None:
    """A logger must expose callable error/warning/info/debug methods."""
    if isinstance(log, (str, bytes, int, float, bool, list, tuple, dict)):
        raise ArgumentTypeError("log option must be a logger object")
    for method in LOGGER_METHODS:
        if not hasattr(log, method):
            raise MissingArgumentError(f"log object lacks a '{method}' method")
        if not callable(getattr(log, method)):
            raise ArgumentTypeError(f"log.{method} must be callable")


def expect_options(options: Any) -> TrackerOptions:
    """Coerce create() options into TrackerOptions, checking the log option."""
    if options is None:
        return TrackerOptions()
    if isinstance(options, TrackerOptions):
        opts = options
    elif isinstance(options, dict):
        opts = TrackerOptions(**options)
    else:
        raise ArgumentTypeError("options must be given as a dict or TrackerOptions")

    # False is accepted as "no logger"
    if opts.log is False:
        opts = opts.model_copy(update={"log": None})
    if opts.log is not None:
        expect_logger(opts.log)
    return opts


def _expect_field(data: Dict[str, Any], field: str, missing_msg: str, type_msg: str, blank_msg: str) -> None:
    if field not in data or data[field] is None:
        raise InvalidRecordError(missing_msg)
    if not isinstance(data[field], str):
        raise RecordTypeError(type_msg)
    if not data[field].strip():
        raise InvalidRecordError(blank_msg)


def validate_record(dl_type: str, data: Any) -> None:
    """
    Check that ``data`` carries the fields ``dl_type`` requires.

    ``dl_type`` is assumed to have passed expect_dl_type() already.
    """
    if not isinstance(data, dict):
        raise RecordTypeError("package metadata must be a dict")

    # The one field that every package metadata must have
    if not data.get("filename"):
        raise InvalidRecordError("package metadata must include a filename")
    if not isinstance(data["filename"], str):
        raise RecordTypeError("filename must be a string")

    if dl_type == "tag":
        _expect_field(
            data, "spec",
            "tag-type metadata must include tag name",
            "tag name must be a string",
            "tag name must be a non-empty string",
        )

    if dl_type in ("semver", "tag"):
        _expect_field(
            data, "name",
            f"{dl_type}-type metadata must include package name",
            "package name must be a string",
            "package name must be a non-empty string",
        )
        _expect_field(
            data, "version",
            f"{dl_type}-type metadata must include version",
            "version spec must be a string",
            "version spec must be a non-empty string",
        )

    elif dl_type == "git":
        _expect_field(
            data, "repo",
            "git-type metadata must include repo spec",
            "git repo spec must be a string",
            "git repo spec must be a non-empty string",
        )
        if "commit" not in data or data["commit"] is None:
            raise InvalidRecordError("git-type metadata must include commit hash")
        if not isinstance(data["commit"], str):
            raise RecordTypeError("git commit must be a string")
        if not RE_HEX40.match(data["commit"]):
            raise InvalidRecordError("git commit must be a 40-character hex string")

        if "refs" in data:
            refs = data["refs"]
            if not isinstance(refs, list):
                raise RecordTypeError("git-type metadata property 'refs' must be a list")
            if not refs:
                raise InvalidRecordError("git-type metadata refs must contain at least one tag")
            for ref in refs:
                if not isinstance(ref, str):
                    raise RecordTypeError("git ref must be a string")
                if not ref.strip():
                    raise InvalidRecordError("git ref must be a non-empty string")

    elif dl_type == "url":
        _expect_field(
            data, "spec",
            "url-type metadata must include URL",
            "URL must be a string",
            "url spec must be a non-empty string",
        )


def expect_query(dl_type: str, name: Any, spec: Any) -> None:
    """Check get_data()/contains() arguments for the given package type."""
    expect_dl_type(dl_type)
    if dl_type in ("semver", "tag"):
        expect_nonempty_string(name, "name")
    elif dl_type == "git":
        # An empty name selects legacy git data by spec alone
        if name is not None and not isinstance(name, str):
            raise ArgumentTypeError("git repo name must be given as a string")
    elif dl_type == "url":
        if not _is_empty(name):
            raise MissingArgumentError("name value must be empty for type url")

    if spec is None:
        raise MissingArgumentError("package spec required")
    if not isinstance(spec, str):
        raise ArgumentTypeError("package spec must be given as a string")


def expect_record_argument(data: Optional[Any]) -> None:
    if data is None:
        raise MissingArgumentError("package metadata required")
