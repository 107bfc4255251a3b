import json
import os

import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def user_cir(fixtures_dir):
    with open(os.path.join(fixtures_dir, "user_cir.json"), encoding="utf-8") as f:
        return json.load(f)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_builder(client, user_cir, fixtures_dir):
    with open(os.path.join(fixtures_dir, "UserBuilderMethods.php"), encoding="utf-8") as f:
        expected_php = f.read()

    resp = client.post("/builder", json={"cir": user_cir, "class_name": "Example\\User"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["generated"] is True
    assert data["builder_name"] == "Example\\UserBuilderMethods"
    assert data["php"] == expected_php


def test_builder_skips_builder_classes(client, user_cir):
    resp = client.post("/builder", json={"cir": user_cir, "class_name": "Example\\UserBuilder"})

    assert resp.status_code == 200
    assert resp.json()["generated"] is False
    assert resp.json()["php"] == ""


def test_builder_unknown_class(client, user_cir):
    resp = client.post("/builder", json={"cir": user_cir, "class_name": "Example\\Nope"})

    assert resp.status_code == 404


def test_builder_malformed_cir(client):
    resp = client.post("/builder", json={"cir": {"nodes": "x"}, "class_name": "Foo"})

    assert resp.status_code == 400


@pytest.mark.parametrize("cir", [
    {"nodes": ["x"], "edges": []},
    {"nodes": [{"id": "t", "kind": "TypeDecl", "attrs": "Foo"}], "edges": []},
    {"nodes": [], "edges": [42]},
])
def test_builder_rejects_non_object_entries(client, cir):
    resp = client.post("/builder", json={"cir": cir, "class_name": "Foo"})

    assert resp.status_code == 400


def test_builder_missing_fields(client):
    assert client.post("/builder", json={"class_name": "Foo"}).status_code == 422


def test_batch(client, user_cir):
    resp = client.post("/builder/batch", json={"cir": user_cir})

    assert resp.status_code == 200
    builders = resp.json()["builders"]
    assert [b["class_name"] for b in builders] == ["Example\\User"]


def test_batch_skips_abstract_and_interfaces(client, cir_doc):
    cir_doc.add_class("App\\Foo")
    cir_doc.add_class("App\\Base", is_abstract=True)
    cir_doc.add_class("App\\Contract", kind="interface")

    resp = client.post("/builder/batch", json={"cir": cir_doc.to_json()})

    assert [b["class_name"] for b in resp.json()["builders"]] == ["App\\Foo"]


def test_marker(client):
    resp = client.post("/builder/marker", json={})

    assert resp.status_code == 200
    assert resp.json()["marker_interface"] == "Kelunik\\Builders\\Builder"
    assert "interface Builder\n{\n}\n" in resp.json()["php"]


def test_discover(client, user_cir):
    resp = client.post("/builder/discover", json={"cir": user_cir})

    assert resp.status_code == 200
    assert resp.json()["builders"] == ["Example\\UserBuilderMethods", "Example\\UserBuilder"]
