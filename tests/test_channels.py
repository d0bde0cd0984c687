import pytest

from channels import create_channel, update_channel
from models import Video


def channel_payload(**overrides):
    data = {"name": "science", "nameCn": "科学", "youtubeUrl": "https://youtube.com/@science", "prompt": "科普"}
    data.update(overrides)
    return data


def test_create_and_get_channel(auth_client):
    resp = auth_client.post("/api/channels", json=channel_payload())
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True

    got = auth_client.get(f"/api/channels/{body['id']}").get_json()
    assert got["success"] is True
    assert got["channel"]["name"] == "science"
    assert got["channel"]["nameCn"] == "科学"
    assert got["channel"]["createdAt"] == got["channel"]["updatedAt"]


def test_create_duplicate_name_fails(auth_client, channel_id):
    resp = auth_client.post("/api/channels", json=channel_payload(name="history"))
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "频道名已存在"


def test_update_to_own_name_succeeds(auth_client, channel_id):
    resp = auth_client.put(f"/api/channels/{channel_id}", json=channel_payload(name="history", nameCn="历史频道"))
    assert resp.get_json() == {"success": True, "message": "更新成功"}
    got = auth_client.get(f"/api/channels/{channel_id}").get_json()
    assert got["channel"]["nameCn"] == "历史频道"


def test_update_to_other_channel_name_fails(app):
    first = create_channel(channel_payload(name="a"))["id"]
    create_channel(channel_payload(name="b"))
    result = update_channel(first, channel_payload(name="b"))
    assert result["success"] is False
    assert result["message"] == "频道名已被使用"


def test_update_missing_channel_is_not_found(auth_client):
    resp = auth_client.put("/api/channels/does-not-exist", json=channel_payload())
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "频道不存在"


@pytest.mark.parametrize("method", ["get", "delete"])
def test_missing_channel_returns_not_found(auth_client, method):
    resp = getattr(auth_client, method)("/api/channels/does-not-exist")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


@pytest.mark.parametrize("missing", ["name", "nameCn"])
def test_create_requires_name_fields(auth_client, missing):
    data = channel_payload()
    del data[missing]
    resp = auth_client.post("/api/channels", json=data)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "频道名和中文名为必填项"


def test_list_channels_contains_created(auth_client, channel_id):
    auth_client.post("/api/channels", json=channel_payload())
    names = {c["name"] for c in auth_client.get("/api/channels").get_json()["channels"]}
    assert names == {"history", "science"}


def test_delete_channel_keeps_dangling_videos(auth_client, channel_id):
    auth_client.post("/api/videos", json={"channelId": channel_id, "title": "第一集"})
    assert auth_client.delete(f"/api/channels/{channel_id}").get_json()["success"] is True
    assert Video.query.count() == 1

    listed = auth_client.get("/api/videos").get_json()["videos"]
    assert listed[0]["channelId"] == channel_id
    assert listed[0]["channelName"] is None


@pytest.mark.parametrize("data", [{"name": "  ", "nameCn": "科学"}, {"name": "science", "nameCn": " "}])
def test_blank_channel_names_rejected(app, data):
    result = create_channel(data)
    assert result["success"] is False
    assert result["message"] == "频道名和中文名为必填项"


def test_channel_name_is_stripped(app):
    assert create_channel(channel_payload(name="  science "))["success"] is True
    duplicate = create_channel(channel_payload(name="science"))
    assert duplicate["message"] == "频道名已存在"


def test_unique_index_catches_duplicate_channel_name(app, monkeypatch):
    import channels

    first = create_channel(channel_payload(name="a"))["id"]
    create_channel(channel_payload(name="b"))
    monkeypatch.setattr(channels, "channel_name_exists", lambda name, exclude_id=None: False)

    assert create_channel(channel_payload(name="a"))["message"] == "频道名已存在"
    assert update_channel(first, channel_payload(name="b"))["message"] == "频道名已被使用"


def test_list_store_error_returns_failure_result(app):
    from channels import list_channels
    from models import db

    db.drop_all()
    result = list_channels()
    assert result["success"] is False
    assert result["message"] == "数据库操作失败"
