"""Client for the Vercel Blob HTTP API.

Only the three calls the portal needs are implemented: ``put`` an object
under an exact pathname, ``list`` objects by pathname prefix, and ``read`` an
object back through its public URL.
"""

from dataclasses import dataclass
from typing import Optional

import requests

from errors import StoreFailure

LIST_PAGE_SIZE = 1000


@dataclass
class Blob:
    pathname: str
    url: str
    content_type: Optional[str] = None
    size: Optional[int] = None

    @classmethod
    def from_json(cls, data):
        return cls(pathname=data['pathname'],
                   url=data['url'],
                   content_type=data.get('contentType'),
                   size=data.get('size'))


class BlobStore:
    def __init__(self, token, api_url='https://blob.vercel-storage.com',
                 api_version='7', timeout=30, session=None):
        self.token = token
        self.api_url = api_url.rstrip('/')
        self.api_version = str(api_version)
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config, session=None):
        return cls(token=config['BLOB_READ_WRITE_TOKEN'],
                   api_url=config['BLOB_API_URL'],
                   api_version=config['BLOB_API_VERSION'],
                   timeout=config['BLOB_TIMEOUT'],
                   session=session)

    def _headers(self):
        if not self.token:
            raise StoreFailure('Blob store token is not configured')
        return {
            'authorization': f'Bearer {self.token}',
            'x-api-version': self.api_version,
        }

    def _request(self, method, url, **kwargs):
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise StoreFailure(f'Blob store timed out on {method} {url}', e) from e
        except requests.exceptions.RequestException as e:
            raise StoreFailure(f'Blob store unreachable: {e}', e) from e

        if not response.ok:
            raise StoreFailure(
                f'Blob store rejected {method} ({response.status_code}): '
                f'{_error_message(response)}'
            )
        return response

    def put(self, pathname, body, content_type=None, access='public'):
        """Store ``body`` at exactly ``pathname``, replacing any previous object."""
        headers = self._headers()
        headers.update({
            'x-vercel-blob-access': access,
            'x-add-random-suffix': '0',
            'x-allow-overwrite': '1',
        })
        if content_type:
            headers['x-content-type'] = content_type

        response = self._request('PUT', f'{self.api_url}/',
                                 params={'pathname': pathname},
                                 data=body, headers=headers)
        return _parse(response, Blob.from_json)

    def list(self, prefix):
        """Every blob whose pathname starts with ``prefix``, across all pages."""
        headers = self._headers()
        params = {'prefix': prefix, 'limit': LIST_PAGE_SIZE}
        blobs = []
        while True:
            response = self._request('GET', self.api_url, params=params, headers=headers)
            page = _parse(response, _page_from_json)
            blobs.extend(page['blobs'])
            if not page.get('hasMore') or not page.get('cursor'):
                return blobs
            params = dict(params, cursor=page['cursor'])

    def read(self, blob):
        """Content of a public blob."""
        return self._request('GET', blob.url).content


def _error_message(response):
    try:
        error = response.json().get('error') or {}
    except (ValueError, AttributeError):
        return response.text[:200]
    if isinstance(error, dict):
        return error.get('message') or error.get('code') or response.reason
    return str(error)


def _page_from_json(data):
    return dict(data, blobs=[Blob.from_json(item) for item in data.get('blobs', [])])


def _parse(response, build):
    """Decode a JSON answer with ``build``; malformed answers are store failures."""
    try:
        return build(response.json())
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise StoreFailure(f'Unexpected answer from blob store: {e!r}', e) from e
