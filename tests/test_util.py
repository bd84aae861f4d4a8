import base64
import string

import pytest

from clusterlens.kube import Client
from clusterlens.util import (
    ensure_dir_exists,
    file_exists,
    get_cache_key,
    get_parent,
    get_pod_list_by_labels,
    map_to_string,
    mask_string,
    remove_duplicates,
    replace_if_match,
    slice_contains_string,
    slice_diff,
)


def test_slice_contains_string():
    assert slice_contains_string(["a", "b"], "b") is True
    assert slice_contains_string(["a", "b"], "c") is False


def test_remove_duplicates():
    unique, duplicates = remove_duplicates(["a", "b", "a", "c", "b"])
    assert sorted(unique) == ["a", "b", "c"]
    assert duplicates == ["a", "b"]


def test_slice_diff():
    assert slice_diff(["a", "b", "c"], ["b"]) == ["a", "c"]
    assert slice_diff(["a"], ["a"]) == []


@pytest.mark.parametrize("text", ["default", "example-cronjob", "é", ""])
def test_mask_string_keeps_byte_length(text):
    masked = mask_string(text)
    decoded = base64.b64decode(masked).decode("utf-8")
    assert len(decoded) == len(text.encode("utf-8"))
    allowed = set(string.ascii_letters + string.digits + string.punctuation)
    assert all(ch in allowed for ch in decoded)


def test_replace_if_match_whole_word():
    assert replace_if_match("pod web-1 failed", "web-1", "X") == "pod X failed"
    assert replace_if_match("webserver", "web", "X") == "webserver"


def test_replace_if_match_no_match_returns_text():
    assert replace_if_match("nothing here", "absent", "X") == "nothing here"


def test_get_cache_key_is_stable_hex():
    key = get_cache_key("openai", "english", "payload")
    assert key == get_cache_key("openai", "english", "payload")
    assert len(key) == 64
    assert all(ch in string.hexdigits for ch in key)
    assert key != get_cache_key("openai", "french", "payload")


def test_get_pod_list_by_labels():
    client = Client(
        {"kind": "Pod", "metadata": {"name": "web-pod", "namespace": "default", "labels": {"app": "web"}}},
        {"kind": "Pod", "metadata": {"name": "db-pod", "namespace": "default", "labels": {"app": "db"}}},
    )
    pods = get_pod_list_by_labels(client, "default", {"app": "web"})
    assert [p["metadata"]["name"] for p in pods] == ["web-pod"]


def test_file_exists(tmp_path):
    target = tmp_path / "present.txt"
    target.write_text("x")
    assert file_exists(target) is True
    assert file_exists(tmp_path / "absent.txt") is False


def test_ensure_dir_exists_is_idempotent(tmp_path):
    nested = tmp_path / "a" / "b"
    ensure_dir_exists(nested)
    ensure_dir_exists(nested)
    assert nested.is_dir()


def test_map_to_string():
    assert map_to_string({"app": "web"}) == "app=web"
    assert sorted(map_to_string({"a": "1", "b": "2"}).split(",")) == ["a=1", "b=2"]
    with pytest.raises(ValueError):
        map_to_string({})


def owned(kind, name, owner_kind=None, owner_name=None, namespace="default"):
    metadata = {"name": name, "namespace": namespace}
    if owner_kind:
        metadata["ownerReferences"] = [{"kind": owner_kind, "name": owner_name}]
    return {"kind": kind, "metadata": metadata}


def test_get_parent_follows_chain_to_deployment():
    client = Client(
        owned("Deployment", "web"),
        owned("ReplicaSet", "web-rs", "Deployment", "web"),
    )
    pod = owned("Pod", "web-pod", "ReplicaSet", "web-rs")
    assert get_parent(client, pod["metadata"]) == "Deployment/" + "web"


def test_get_parent_top_level_replicaset():
    client = Client(owned("ReplicaSet", "lone-rs"))
    pod = owned("Pod", "p", "ReplicaSet", "lone-rs")
    assert get_parent(client, pod["metadata"]) == "ReplicaSet/" + "lone-rs"


def test_get_parent_missing_owner_and_no_owner():
    client = Client()
    assert get_parent(client, owned("Pod", "p", "ReplicaSet", "gone")["metadata"]) == ""
    assert get_parent(client, owned("Pod", "solo")["metadata"]) == "solo"
    assert get_parent(client, owned("Pod", "j", "Job", "job1")["metadata"]) == "j"


def test_get_parent_webhook_label():
    client = Client({"kind": "MutatingWebhookConfiguration", "metadata": {"name": "hook"}})
    meta = owned("Pod", "p", "MutatingWebhookConfiguration", "hook")["metadata"]
    assert get_parent(client, meta) == "MutatingWebhook/" + "hook"