"""任务 API 测试

测试内容：
1. 创建 / 查询 / 更新 / 删除
2. 校验失败返回 422 且不写入历史
3. 排序更新不产生历史
4. 跨用户访问返回 404
"""

from datetime import date, timedelta

from httpx import AsyncClient


class TestCreateTodo:
    async def test_create_returns_201(self, client: AsyncClient, headers):
        resp = await client.post(
            "/api/v1/todos",
            json={"title": "レポート", "priority": "high", "description": "第3章"},
            headers=headers,
        )
        assert resp.status_code == 201
        data = resp.json()
        assert len(data["id"]) == 26
        assert data["title"] == "レポート"
        assert data["priority"] == "high"
        assert data["status"] == "pending"
        assert data["completed"] is False

    async def test_empty_category_id_means_uncategorized(self, client: AsyncClient, headers):
        resp = await client.post(
            "/api/v1/todos", json={"title": "未分類", "category_id": ""}, headers=headers
        )
        assert resp.status_code == 201
        assert resp.json()["category_id"] is None

    async def test_positions_increment(self, client: AsyncClient, headers):
        first = await client.post("/api/v1/todos", json={"title": "一"}, headers=headers)
        second = await client.post("/api/v1/todos", json={"title": "二"}, headers=headers)
        assert second.json()["position"] == first.json()["position"] + 1

    async def test_blank_title_rejected(self, client: AsyncClient, headers, store_group):
        resp = await client.post("/api/v1/todos", json={"title": "  "}, headers=headers)
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_FAILED"
        assert error["details"]["validation_errors"] == {"title": ["を入力してください"]}

        cursor = await store_group.conn.execute("SELECT COUNT(*) FROM task_history")
        assert (await cursor.fetchone())[0] == 0

    async def test_past_due_date_rejected(self, client: AsyncClient, headers):
        yesterday = (date.today() - timedelta(days=2)).isoformat()
        resp = await client.post(
            "/api/v1/todos",
            json={"title": "期限切れ", "due_date": yesterday},
            headers=headers,
        )
        assert resp.status_code == 422
        assert "due_date" in resp.json()["error"]["details"]["validation_errors"]

    async def test_missing_title_is_request_validation_error(
        self, client: AsyncClient, headers
    ):
        resp = await client.post("/api/v1/todos", json={}, headers=headers)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_FAILED"
        assert "title" in resp.json()["error"]["details"]["validation_errors"]

    async def test_requires_user_header(self, client: AsyncClient):
        resp = await client.post("/api/v1/todos", json={"title": "x"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"

    async def test_unknown_user_rejected(self, client: AsyncClient):
        resp = await client.get("/api/v1/todos", headers={"X-User-Id": "nobody"})
        assert resp.status_code == 401


class TestReadTodos:
    async def test_list_only_own_todos(self, client: AsyncClient, headers, other_headers, todo):
        await client.post("/api/v1/todos", json={"title": "他人のタスク"}, headers=other_headers)

        resp = await client.get("/api/v1/todos", headers=headers)
        assert resp.status_code == 200
        assert [t["id"] for t in resp.json()] == [todo["id"]]

    async def test_list_filters(self, client: AsyncClient, headers):
        await client.post(
            "/api/v1/todos", json={"title": "牛乳を買う", "priority": "high"}, headers=headers
        )
        await client.post(
            "/api/v1/todos",
            json={"title": "掃除", "description": "牛乳パックを捨てる"},
            headers=headers,
        )
        await client.post("/api/v1/todos", json={"title": "洗濯"}, headers=headers)

        by_priority = await client.get("/api/v1/todos?priority=high", headers=headers)
        assert [t["title"] for t in by_priority.json()] == ["牛乳を買う"]

        by_query = await client.get("/api/v1/todos", params={"q": "牛乳"}, headers=headers)
        assert [t["title"] for t in by_query.json()] == ["牛乳を買う", "掃除"]

    async def test_detail_includes_counts(self, client: AsyncClient, headers, todo):
        resp = await client.get(f"/api/v1/todos/{todo['id']}", headers=headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["history_count"] == 1
        assert data["comments_count"] == 0

    async def test_other_users_todo_is_404(self, client: AsyncClient, other_headers, todo):
        resp = await client.get(f"/api/v1/todos/{todo['id']}", headers=other_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


class TestUpdateTodo:
    async def test_partial_update(self, client: AsyncClient, headers, todo):
        resp = await client.patch(
            f"/api/v1/todos/{todo['id']}",
            json={"status": "in_progress"},
            headers=headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "in_progress"
        assert data["title"] == "買い物"

    async def test_invalid_update_writes_no_history(self, client: AsyncClient, headers, todo):
        resp = await client.patch(
            f"/api/v1/todos/{todo['id']}",
            json={"title": "", "status": "completed"},
            headers=headers,
        )
        assert resp.status_code == 422

        detail = await client.get(f"/api/v1/todos/{todo['id']}", headers=headers)
        assert detail.json()["status"] == "pending"
        assert detail.json()["history_count"] == 1

    async def test_null_status_rejected(self, client: AsyncClient, headers, todo):
        resp = await client.patch(
            f"/api/v1/todos/{todo['id']}", json={"status": None}, headers=headers
        )
        assert resp.status_code == 422
        assert "status" in resp.json()["error"]["details"]["validation_errors"]

    async def test_invalid_enum_rejected(self, client: AsyncClient, headers, todo):
        resp = await client.patch(
            f"/api/v1/todos/{todo['id']}", json={"priority": "urgent"}, headers=headers
        )
        assert resp.status_code == 422

    async def test_foreign_category_rejected(
        self, client: AsyncClient, headers, other_headers, todo
    ):
        category = await client.post(
            "/api/v1/categories", json={"name": "他人の分類"}, headers=other_headers
        )
        resp = await client.patch(
            f"/api/v1/todos/{todo['id']}",
            json={"category_id": category.json()["id"]},
            headers=headers,
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["details"]["validation_errors"] == {
            "category_id": ["は存在しないカテゴリです"]
        }

    async def test_empty_category_id_clears_category(
        self, client: AsyncClient, headers, todo
    ):
        category = await client.post("/api/v1/categories", json={"name": "仕事"}, headers=headers)
        await client.patch(
            f"/api/v1/todos/{todo['id']}",
            json={"category_id": category.json()["id"]},
            headers=headers,
        )

        resp = await client.patch(
            f"/api/v1/todos/{todo['id']}", json={"category_id": ""}, headers=headers
        )
        assert resp.status_code == 200
        assert resp.json()["category_id"] is None

        histories = (
            await client.get(f"/api/v1/todos/{todo['id']}/histories", headers=headers)
        ).json()
        # created + 設定 + 解除
        assert len(histories) == 3
        assert histories[0]["field_name"] == "category_id"
        assert histories[0]["old_value"] == "仕事"
        assert histories[0]["new_value"] is None

    async def test_empty_category_id_on_uncategorized_is_noop(
        self, client: AsyncClient, headers, todo
    ):
        resp = await client.patch(
            f"/api/v1/todos/{todo['id']}", json={"category_id": ""}, headers=headers
        )
        assert resp.status_code == 200
        detail = (await client.get(f"/api/v1/todos/{todo['id']}", headers=headers)).json()
        assert detail["history_count"] == 1

    async def test_update_other_users_todo_is_404(
        self, client: AsyncClient, other_headers, todo
    ):
        resp = await client.patch(
            f"/api/v1/todos/{todo['id']}", json={"title": "乗っ取り"}, headers=other_headers
        )
        assert resp.status_code == 404


class TestDeleteAndOrder:
    async def test_delete_cascades_history(self, client: AsyncClient, headers, todo, store_group):
        resp = await client.delete(f"/api/v1/todos/{todo['id']}", headers=headers)
        assert resp.status_code == 204

        assert (await client.get(f"/api/v1/todos/{todo['id']}", headers=headers)).status_code == 404
        assert await store_group.history_store.count_for_task(todo["id"]) == 0

    async def test_reorder(self, client: AsyncClient, headers, todo):
        second = (
            await client.post("/api/v1/todos", json={"title": "二番目"}, headers=headers)
        ).json()

        resp = await client.patch(
            "/api/v1/todos/order",
            json={"todos": [{"id": second["id"], "position": 0}, {"id": todo["id"], "position": 1}]},
            headers=headers,
        )
        assert resp.status_code == 200

        listing = await client.get("/api/v1/todos", headers=headers)
        assert [t["id"] for t in listing.json()] == [second["id"], todo["id"]]

        # 排序不追踪历史
        detail = await client.get(f"/api/v1/todos/{todo['id']}", headers=headers)
        assert detail.json()["history_count"] == 1

    async def test_reorder_unknown_id_is_404(self, client: AsyncClient, headers, todo):
        resp = await client.patch(
            "/api/v1/todos/order",
            json={"todos": [{"id": todo["id"], "position": 0}, {"id": "missing", "position": 1}]},
            headers=headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["details"]["missing_todos"] == ["missing"]
