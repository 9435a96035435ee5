import requests

from scan_engine import InMemoryProductSource, OpenBeautyFactsClient, ProductInfo
from scan_engine.openbeautyfacts_client import FallbackProductSource


class FakeResponse:
    def __init__(self, payload=None, status_code=200, bad_json=False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.bad_json:
            raise ValueError("not json")
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error:
            raise self.error
        return self.response


def test_found_product_uses_language_specific_text():
    session = FakeSession(
        FakeResponse(
            {
                "status": 1,
                "product": {
                    "product_name": "Night Cream",
                    "lang": "fr",
                    "ingredients_text_fr": "Aqua, Parfum",
                    "ingredients_text": "Water, Fragrance",
                },
            }
        )
    )
    client = OpenBeautyFactsClient(session=session, timeout=2.0)
    product = client.get_product_by_barcode("3600523")

    assert product.id == "obf:3600523"
    assert product.name == "Night Cream"
    assert product.ingredients_text == "Aqua, Parfum"
    assert product.source == "openbeautyfacts"
    assert session.calls == [
        ("https://world.openbeautyfacts.org/api/v0/product/3600523.json", 2.0)
    ]


def test_unknown_product_returns_none():
    client = OpenBeautyFactsClient(session=FakeSession(FakeResponse({"status": 0})))
    assert client.get_product_by_barcode("000") is None


def test_network_errors_return_none():
    client = OpenBeautyFactsClient(session=FakeSession(error=requests.ConnectionError("down")))
    assert client.get_product_by_barcode("000") is None


def test_http_and_decode_errors_return_none():
    assert OpenBeautyFactsClient(
        session=FakeSession(FakeResponse(status_code=503))
    ).get_product_by_barcode("000") is None
    assert OpenBeautyFactsClient(
        session=FakeSession(FakeResponse(bad_json=True))
    ).get_product_by_barcode("000") is None


def test_catalog_ids_are_not_resolved():
    assert OpenBeautyFactsClient(session=FakeSession()).get_product("p-1") is None


def test_fallback_source_prefers_first_hit():
    catalog = InMemoryProductSource([ProductInfo(id="p-1", barcode="111", ingredients_text="Aqua")])
    remote = OpenBeautyFactsClient(
        session=FakeSession(
            FakeResponse({"status": 1, "product": {"ingredients_text": "Water"}})
        )
    )
    source = FallbackProductSource(catalog, remote)

    assert source.get_product_by_barcode("111").id == "p-1"
    assert source.get_product_by_barcode("222").id == "obf:222"
    assert source.get_product("p-1").id == "p-1"
    assert source.get_product("p-2") is None
