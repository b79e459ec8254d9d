"""Object layout of applications in the blob store.

Everything an applicant submits ends up under ``uploads/<applicant id>/``:
one object per attachment, named after its slot, and the form fields as
``data.json``. Reading goes through prefix listings of that layout.

Writes are not transactional. A failing write leaves the objects written
before it in place, and two applicants with the same name share (and
overwrite) one directory.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from errors import NotFound, StoreFailure

UPLOAD_PREFIX = 'uploads'

DATA_FILENAME = 'data.json'

# Attachment slot -> stored filename
STORED_FILENAMES = {
    'profileImage': 'profile.jpg',
    'cnicFront': 'cnic_front.jpg',
    'cnicBack': 'cnic_back.jpg',
    'matricCert': 'matric_certificate.jpg',
    'interCert': 'intermediate_certificate.jpg',
    'domicileDoc': 'domicile_certificate.jpg',
}


@dataclass
class ApplicantRecord:
    form_data: Dict[str, Any]
    files: List[str] = field(default_factory=list)

    def to_dict(self):
        return {'formData': self.form_data, 'files': self.files}


def stored_filename(slot, original_filename):
    return STORED_FILENAMES.get(slot, original_filename)


def applicant_prefix(applicant_id):
    return f'{UPLOAD_PREFIX}/{applicant_id}/'


def object_key(applicant_id, filename):
    return f'{applicant_prefix(applicant_id)}{filename}'


def serialize_form_data(fields):
    return json.dumps(fields, indent=2, ensure_ascii=False).encode('utf-8')


def persist(store, applicant_id, submission):
    """Write the attachments and ``data.json`` of a validated submission.

    Returns the written blobs. The first failing write raises
    :class:`StoreFailure`.
    """
    written = []
    for slot, attachment in submission.attachments.items():
        filename = stored_filename(slot, attachment.filename)
        blob = store.put(object_key(applicant_id, filename),
                         attachment.content,
                         content_type=attachment.content_type,
                         access='public')
        written.append(blob)

    blob = store.put(object_key(applicant_id, DATA_FILENAME),
                     serialize_form_data(submission.fields),
                     content_type='application/json',
                     access='public')
    written.append(blob)
    return written


def list_applicants(store):
    """Ids of every applicant with at least one stored object, sorted."""
    blobs = store.list(f'{UPLOAD_PREFIX}/')
    applicants = set()
    for blob in blobs:
        segments = blob.pathname.split('/')
        if len(segments) > 1 and segments[1]:
            applicants.add(segments[1])
    return sorted(applicants)


def get_applicant(store, applicant_id):
    """Form data and stored filenames of one applicant.

    Raises :class:`NotFound` when the applicant has no ``data.json``, even if
    attachments were stored.
    """
    blobs = store.list(applicant_prefix(applicant_id))

    data_blob = None
    files = []
    for blob in blobs:
        name = blob.pathname.rsplit('/', 1)[-1]
        if name == DATA_FILENAME and data_blob is None:
            data_blob = blob
        elif name != DATA_FILENAME:
            files.append(name)

    if data_blob is None:
        raise NotFound('Student not found')

    try:
        form_data = json.loads(store.read(data_blob))
    except ValueError as e:
        raise StoreFailure(f'Unreadable form data for {applicant_id}', e) from e

    return ApplicantRecord(form_data=form_data, files=files)


def get_file(store, applicant_id, filename):
    """Public URL of a stored file; the caller redirects to it."""
    blobs = store.list(object_key(applicant_id, filename))
    if not blobs:
        raise NotFound('File not found')
    return blobs[0].url
