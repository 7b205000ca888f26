import base64
from io import BytesIO

import pytest
import requests
from PIL import Image


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, content=b""):
        self.status_code = status_code
        self._json = json_data
        self.content = content

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


def image_bytes(size=(250, 350), color="red", fmt="PNG"):
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def data_uri(size=(250, 350), color="red"):
    return "data:image/png;base64," + base64.b64encode(image_bytes(size, color)).decode("ascii")


def lorcast_card(name, version, image_url, set_name="The First Chapter"):
    return {
        "name": name,
        "version": version,
        "set": {"name": set_name},
        "image_uris": {"digital": {"normal": image_url}},
    }


class RecordingList(list):
    pass


@pytest.fixture
def http(monkeypatch):
    """Route requests.get through calls.handler and record every (url, kwargs)."""
    calls = RecordingList()
    calls.handler = lambda url, **kwargs: FakeResponse(404)

    def fake_get(url, **kwargs):
        calls.append((url, kwargs))
        return calls.handler(url, **kwargs)

    monkeypatch.setattr(requests, "get", fake_get)
    return calls
