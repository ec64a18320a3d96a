import httpx

from docintel.services.llm.providers import qwen_provider

SESSION = {"X-Session-Id": "tester"}


def upload(client, name="report.pdf", size=2048, engine="qwen", folder_id="root", headers=SESSION):
    return client.post("/api/v1/files", headers=headers, json={
        "name": name,
        "type": "application/pdf",
        "size": size,
        "folderId": folder_id,
        "aiEngine": engine,
    })


def test_upload_updates_usage_analytics_and_organization(client):
    response = upload(client)

    assert response.status_code == 201
    file = response.json()
    assert file["id"]
    assert file["aiStatus"] == "pending"

    usage = client.get("/api/v1/usage", headers=SESSION).json()
    analytics = client.get("/api/v1/analytics", headers=SESSION).json()
    organization = client.get("/api/v1/organization", headers=SESSION).json()

    assert usage["uploadsUsed"] == 1
    assert usage["storageUsed"] == 2048
    assert usage["tokensUsed"] == 150
    assert analytics["totalFiles"] == 1
    assert analytics["aiEngineUsage"] == {"openai": 0, "docintel": 0, "qwen": 1}
    assert analytics["aiEngineUsagePercent"] == {"openai": 0.0, "docintel": 0.0, "qwen": 100.0}
    assert organization["usage"]["storageUsed"] == 2048


def test_duplicate_file_id_conflicts(client):
    first = client.post("/api/v1/files", headers=SESSION, json={
        "id": "dup", "name": "a.pdf", "type": "application/pdf", "size": 100,
    })
    second = client.post("/api/v1/files", headers=SESSION, json={
        "id": "dup", "name": "b.pdf", "type": "application/pdf", "size": 300,
    })

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {"error": "File already exists: dup"}
    assert client.get("/api/v1/usage", headers=SESSION).json()["storageUsed"] == 100


def test_sessions_are_isolated(client):
    upload(client)

    other = client.get("/api/v1/usage", headers={"X-Session-Id": "someone-else"}).json()

    assert other["uploadsUsed"] == 0
    assert len(client.get("/api/v1/files", headers=SESSION).json()) == 1


def test_delete_file(client):
    file_id = upload(client, size=100).json()["id"]

    assert client.delete(f"/api/v1/files/{file_id}", headers=SESSION).status_code == 200
    assert client.delete(f"/api/v1/files/{file_id}", headers=SESSION).status_code == 404
    assert client.get(f"/api/v1/files/{file_id}", headers=SESSION).status_code == 404

    usage = client.get("/api/v1/usage", headers=SESSION).json()
    assert usage["storageUsed"] == 0


def test_folders(client):
    x = client.post("/api/v1/folders", headers=SESSION, json={"name": "X", "parentId": "root"}).json()
    y = client.post("/api/v1/folders", headers=SESSION, json={"name": "Y", "parentId": x["id"]}).json()

    assert x["path"] == "/X"
    assert y["path"] == "/X/Y"
    assert [f["name"] for f in client.get("/api/v1/folders", headers=SESSION).json()] == ["X", "Y"]

    missing = client.post("/api/v1/folders", headers=SESSION, json={"name": "Z", "parentId": "nope"})
    assert missing.status_code == 404

    upload(client, folder_id=x["id"])
    files = client.get(f"/api/v1/folders/{x['id']}/files", headers=SESSION).json()
    assert len(files) == 1
    assert client.get("/api/v1/files", headers=SESSION, params={"folderId": y["id"]}).json() == []


def test_current_folder(client):
    folder = client.post("/api/v1/folders", headers=SESSION, json={"name": "Inbox"}).json()

    assert client.get("/api/v1/folders/current", headers=SESSION).json() is None
    assert client.put("/api/v1/folders/current", headers=SESSION, json={"folderId": folder["id"]}).json()["id"] == folder["id"]
    assert client.get("/api/v1/folders/current", headers=SESSION).json()["name"] == "Inbox"
    assert client.put("/api/v1/folders/current", headers=SESSION, json={"folderId": "nope"}).status_code == 404


def test_update_usage(client):
    response = client.post("/api/v1/usage", headers=SESSION, json={"kind": "chats", "amount": 2})

    assert response.status_code == 200
    assert response.json()["chatsUsed"] == 2
    assert client.post("/api/v1/usage", headers=SESSION, json={"kind": "tokens", "amount": 2}).status_code == 422


def test_chat_messages(client):
    created = client.post("/api/v1/chat/messages", headers=SESSION, json={
        "content": "hello", "role": "user", "aiEngine": "openai",
    })

    assert created.status_code == 201
    assert client.get("/api/v1/usage", headers=SESSION).json()["chatsUsed"] == 1
    assert [m["content"] for m in client.get("/api/v1/chat/messages", headers=SESSION).json()] == ["hello"]


def test_organization_replace(client):
    organization = client.get("/api/v1/organization", headers=SESSION).json()
    organization["name"] = "Renamed"
    organization["plan"] = "pro"

    assert client.put("/api/v1/organization", headers=SESSION, json=organization).status_code == 200
    assert client.get("/api/v1/organization", headers=SESSION).json()["plan"] == "pro"


def test_api_keys_feed_chat(client, monkeypatch):
    saved = client.put("/api/v1/settings/api-keys", headers=SESSION, json={"qwen": "user-key", "openai": ""})
    assert saved.json()["settings"]["apiKeys"]["qwen"] == "user-key"
    assert client.get("/api/v1/settings/api-keys", headers=SESSION).json()["qwen"] == "user-key"

    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={
            "output": {"choices": [{"message": {"content": "Two invoices are due."}}]},
            "usage": {"total_tokens": 42},
        })

    monkeypatch.setattr(qwen_provider, "transport", httpx.MockTransport(handler))
    folder = client.post("/api/v1/folders", headers=SESSION, json={"name": "Invoices"}).json()
    upload(client, name="inv-1.pdf", folder_id=folder["id"])

    response = client.post("/api/v1/chat/send", headers=SESSION, json={
        "message": "What is due?", "engine": "qwen", "folderId": folder["id"],
    })

    assert response.status_code == 200
    body = response.json()
    assert body["reply"]["content"] == "Two invoices are due."
    assert body["reply"]["usage"] == {"tokensUsed": 42, "cost": 0.0}
    assert seen[0].headers["authorization"] == "Bearer user-key"
    assert "Folder: Invoices" in seen[0].content.decode()

    messages = client.get("/api/v1/chat/messages", headers=SESSION).json()
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert client.get("/api/v1/usage", headers=SESSION).json()["chatsUsed"] == 1


def test_chat_send_reports_missing_key(client):
    response = client.post("/api/v1/chat/send", headers=SESSION, json={"message": "hi", "engine": "openai"})

    assert response.status_code == 200
    assert "OpenAI API key is not configured" in response.json()["reply"]["content"]
