"""
Minimal client for the Medium publishing API.

Only what publishing a converted post needs: the current user, image upload
and post creation. Responses are returned as the plain 'data' dicts.
"""

import logging
import os

import requests

from .config import DEFAULT_CONFIG
from .exceptions import PublishError

logger = logging.getLogger('md2medium')


class MediumClient:
    def __init__(self, access_token, config=None, session=None):
        self.config = config or DEFAULT_CONFIG
        self.base_url = self.config.MEDIUM_API_URL.rstrip('/')
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {access_token}',
            'Accept': 'application/json',
            'Accept-Charset': 'utf-8',
        })

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}/{path.lstrip('/')}"
        kwargs.setdefault('timeout', self.config.HTTP_TIMEOUT)
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise PublishError(f"{method} {url} failed: {e}") from e

        if resp.status_code >= 400:
            raise PublishError(
                f"{method} {url} returned {resp.status_code}: {self._error_message(resp)}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()['data']
        except (ValueError, KeyError, TypeError) as e:
            raise PublishError(f"Unexpected response from {url}: {resp.text[:200]}",
                               status_code=resp.status_code) from e

    @staticmethod
    def _error_message(resp):
        try:
            errors = resp.json().get('errors') or []
        except ValueError:
            return resp.text[:200]
        messages = [err.get('message', '') for err in errors if isinstance(err, dict)]
        return '; '.join(m for m in messages if m) or resp.reason or 'unknown error'

    def get_user(self):
        """Return the authenticated user ({'id', 'username', 'name', 'url', ...})."""
        return self._request('GET', '/me')

    def upload_image(self, file_path, content_type=None):
        """
        Upload a local image file.

        Returns:
            Image dict; 'url' is the hosted location
        """
        content_type = content_type or 'application/octet-stream'
        with open(file_path, 'rb') as f:
            files = {'image': (os.path.basename(file_path), f, content_type)}
            image = self._request('POST', '/images', files=files)
        logger.debug("Uploaded %s -> %s", file_path, image.get('url'))
        return image

    def create_post(self, user_id, title, content, tags=None, publish_status=None,
                    canonical_url=None, content_format='html'):
        """Create a post for user_id and return the post dict ('url', 'publishStatus', ...)."""
        payload = {
            'title': title,
            'contentFormat': content_format,
            'content': content,
            'tags': list(tags or []),
            'publishStatus': publish_status or self.config.DEFAULT_PUBLISH_STATUS,
        }
        if canonical_url:
            payload['canonicalUrl'] = canonical_url
        return self._request('POST', f'/users/{user_id}/posts', json=payload)
