"""Tests for API endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from pixelsmith.main import app
from tests.conftest import ITEM_TYPES


client = TestClient(app)


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"
    assert data["grid"] == "64x64"
    assert data["generators_registered"] >= len(ITEM_TYPES)


def test_list_items():
    response = client.get("/api/items")
    assert response.status_code == 200
    generators = {g["item_type"]: g for g in response.json()["generators"]}
    for item_type in ITEM_TYPES:
        assert item_type in generators
    assert "katana" in generators["sword"]["sub_types"]
    assert generators["jewelry"]["aliases"]["choker"] == "collar"


def test_generate_sword():
    response = client.post("/api/generate/sword", json={"subType": "katana", "material": "STEEL", "seed": 42})
    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "sword"
    assert data["seed"] == 42
    assert data["name"]
    assert data["itemData"]["swordType"] == "katana"
    assert data["imageDataUrl"].startswith("data:image/png;base64,")
    # In-process fields never reach the wire
    assert "surface" not in data and "components" not in data


def test_generate_without_body():
    response = client.post("/api/generate/robe")
    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "robe"
    assert data["itemData"]["subType"] in ("short", "medium", "long")


def test_generate_reports_warnings():
    response = client.post("/api/generate/shield", json={"subType": "pavise"})
    assert response.status_code == 200
    assert any("pavise" in w for w in response.json()["itemData"]["warnings"])


def test_generate_unknown_type():
    response = client.post("/api/generate/trebuchet", json={})
    assert response.status_code == 404


def test_generate_invalid_body():
    assert client.post("/api/generate/bow", json={"seed": "abc"}).status_code == 422
    assert client.post("/api/generate/bow", json=[1, 2, 3]).status_code == 422


def test_list_materials():
    response = client.get("/api/materials")
    assert response.status_code == 200
    materials = {m["key"]: m for m in response.json()["materials"]}
    assert materials["IRON"]["name"] == "Iron"
    assert materials["GOLD"]["base"].startswith("#")


def test_broken_generator_module_raises(monkeypatch):
    import importlib

    from pixelsmith import main

    real_import = importlib.import_module

    def failing_import(name, *args, **kwargs):
        if name == "pixelsmith.items.sword":
            raise ModuleNotFoundError("No module named 'missing_dependency'")
        return real_import(name, *args, **kwargs)

    monkeypatch.setattr(importlib, "import_module", failing_import)
    with pytest.raises(ModuleNotFoundError, match="missing_dependency"):
        main._register_generators()


def test_missing_generator_package_is_logged(monkeypatch, caplog):
    import importlib

    from pixelsmith import main

    real_import = importlib.import_module

    def failing_import(name, *args, **kwargs):
        if name == "pixelsmith.items":
            raise ModuleNotFoundError("No module named 'pixelsmith.items'")
        return real_import(name, *args, **kwargs)

    monkeypatch.setattr(importlib, "import_module", failing_import)
    with caplog.at_level("WARNING", logger="pixelsmith.main"):
        main._register_generators()
    assert "Item generators not found" in caplog.text


def test_error_sentinel_is_logged(monkeypatch, caplog):
    from pixelsmith import item_api
    from pixelsmith.engine.assembler import SENTINEL_ERROR, ItemAssembler
    from pixelsmith.engine.config import GridConfig

    broken = ItemAssembler(grid=GridConfig(width=0))
    monkeypatch.setattr(item_api, "generate", lambda item_type, options=None: broken.generate(item_type, options))
    with caplog.at_level("WARNING", logger="pixelsmith.api.generate"):
        response = client.post("/api/generate/sword", json={})
    assert response.status_code == 200
    assert response.json()["itemData"] == {"error": SENTINEL_ERROR}
    assert "error sentinel" in caplog.text
