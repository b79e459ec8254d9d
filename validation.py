"""Decoding and validation of an application form submission."""

import re
from dataclasses import dataclass, field
from typing import Dict

from errors import MissingField, InvalidFormat, DecodeFailure, UploadLimitExceeded
from layout import STORED_FILENAMES

REQUIRED_FIELDS = ('firstName', 'lastName', 'cnic', 'email')

ATTACHMENT_SLOTS = tuple(STORED_FILENAMES)

CNIC_PATTERN = re.compile(r'[0-9]{13}')

_WHITESPACE = re.compile(r'\s+')


@dataclass
class Attachment:
    filename: str
    content_type: str
    content: bytes


@dataclass
class Submission:
    fields: Dict[str, str] = field(default_factory=dict)
    attachments: Dict[str, Attachment] = field(default_factory=dict)


def applicant_id(first_name, last_name):
    """Storage slug of an applicant, e.g. ``("Ali ", "Khan") -> "ali_khan"``.

    Two applicants sharing a name get the same slug and overwrite each
    other's objects.
    """
    name = f'{str(first_name).strip()}_{str(last_name).strip()}'
    return _WHITESPACE.sub('_', name).lower()


def validate(submission):
    """Check the required fields and return the applicant id.

    Raises :class:`MissingField` for the first required field that is absent
    or empty, then :class:`InvalidFormat` when the CNIC is not exactly 13
    digits.
    """
    fields = submission.fields
    for name in REQUIRED_FIELDS:
        value = fields.get(name)
        if not value:
            raise MissingField(name)

    if not CNIC_PATTERN.fullmatch(str(fields['cnic'])):
        raise InvalidFormat('cnic')

    return applicant_id(fields['firstName'], fields['lastName'])


def is_image(content_type):
    return bool(content_type) and content_type.lower().startswith('image/')


def decode_submission(form, files, max_file_size):
    """Build a :class:`Submission` from the parsed multipart body.

    ``form`` and ``files`` are the werkzeug multi-dicts of the request. Only
    the known attachment slots are accepted, one image of at most
    ``max_file_size`` bytes each; empty file inputs are skipped.
    """
    submission = Submission(fields={key: form.get(key) for key in form.keys()})

    for slot in files.keys():
        uploads = [f for f in files.getlist(slot) if f.filename]
        if not uploads:
            continue
        if slot not in ATTACHMENT_SLOTS or len(uploads) > 1:
            raise UploadLimitExceeded('Unexpected field')

        upload = uploads[0]
        if not is_image(upload.mimetype):
            raise DecodeFailure('Only image files are allowed')

        content = upload.read(max_file_size + 1)
        if len(content) > max_file_size:
            raise UploadLimitExceeded('File too large')

        submission.attachments[slot] = Attachment(
            filename=upload.filename,
            content_type=upload.mimetype,
            content=content,
        )

    return submission


def decode_json_submission(data):
    """Build a :class:`Submission` from a JSON body; it carries no attachments."""
    if not isinstance(data, dict):
        data = {}
    return Submission(fields=dict(data))
