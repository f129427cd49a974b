"""Blog — public reading, comment moderation, editor back office."""

from __future__ import annotations

import uuid

from tripgo.blog.models import BlogPost
from tripgo.blog.service import BlogService
from tests.conftest import TestSessionFactory


async def _create_post(client, headers, **overrides):
    body = {
        "title": "Ten Days in the Fjords",
        "content": "Glaciers, waterfalls and a lot of coffee.",
        "excerpt": "A slow trip up the Norwegian coast.",
        "category": "Guides",
        "tags": [" Norway ", "cruise", "norway"],
        "published": True,
        **overrides,
    }
    resp = await client.post("/api/v1/blog/admin/posts", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestPublicBlog:

    async def test_only_published_posts_listed(self, client, admin_headers):
        await _create_post(client, admin_headers)
        await _create_post(client, admin_headers, title="Draft Notes", published=False)

        resp = await client.get("/api/v1/blog/posts")
        items = resp.json()["data"]["items"]
        assert [p["slug"] for p in items] == ["ten-days-in-the-fjords"]
        assert items[0]["tags"] == ["norway", "cruise"]
        assert items[0]["author_name"] == "Test User"
        assert "content" not in items[0]

    async def test_filter_by_tag_and_category(self, client, admin_headers):
        await _create_post(client, admin_headers)
        await _create_post(
            client, admin_headers, title="Lisbon Weekend", category="City Breaks", tags=["portugal"],
        )

        by_tag = await client.get("/api/v1/blog/posts", params={"tag": "Portugal"})
        assert [p["title"] for p in by_tag.json()["data"]["items"]] == ["Lisbon Weekend"]

        by_category = await client.get("/api/v1/blog/posts", params={"category": "Guides"})
        assert [p["title"] for p in by_category.json()["data"]["items"]] == ["Ten Days in the Fjords"]

    async def test_get_post_counts_views(self, client, admin_headers):
        await _create_post(client, admin_headers)
        first = await client.get("/api/v1/blog/posts/ten-days-in-the-fjords")
        assert first.status_code == 200
        assert first.json()["data"]["content"].startswith("Glaciers")
        assert first.json()["data"]["view_count"] == 1

        second = await client.get("/api/v1/blog/posts/ten-days-in-the-fjords")
        assert second.json()["data"]["view_count"] == 2

    async def test_view_count_increments_in_database(self, client, admin_headers, tenant):
        created = await _create_post(client, admin_headers)
        async with TestSessionFactory() as session:
            # loaded before another reader bumps the counter
            stale = await session.get(BlogPost, uuid.UUID(created["id"]))
            assert stale.view_count == 0

            await client.get("/api/v1/blog/posts/ten-days-in-the-fjords")

            post = await BlogService.get_published_by_slug(
                session, tenant.id, "ten-days-in-the-fjords",
            )
            assert post.view_count == 2
            await session.commit()

        third = await client.get("/api/v1/blog/posts/ten-days-in-the-fjords")
        assert third.json()["data"]["view_count"] == 3

    async def test_draft_not_readable(self, client, admin_headers):
        await _create_post(client, admin_headers, title="Secret Draft", published=False)
        resp = await client.get("/api/v1/blog/posts/secret-draft")
        assert resp.status_code == 404

    async def test_categories_and_tags(self, client, admin_headers):
        await _create_post(client, admin_headers)
        await _create_post(
            client, admin_headers, title="Norway by Rail", category="Guides", tags=["norway", "rail"],
        )
        await _create_post(client, admin_headers, title="Hidden", category="Drafts", published=False)

        categories = await client.get("/api/v1/blog/categories")
        assert categories.json()["data"] == ["Guides"]

        tags = await client.get("/api/v1/blog/tags")
        assert tags.json()["data"] == [
            {"tag": "norway", "count": 2},
            {"tag": "cruise", "count": 1},
            {"tag": "rail", "count": 1},
        ]


class TestComments:

    async def test_comment_moderation_flow(self, client, admin_headers, customer_headers):
        post = await _create_post(client, admin_headers)

        resp = await client.post(
            f"/api/v1/blog/posts/{post['slug']}/comments",
            json={"content": "  Loved this!  "},
            headers=customer_headers,
        )
        assert resp.status_code == 201
        comment = resp.json()["data"]
        assert comment["approved"] is False
        assert comment["content"] == "Loved this!"
        assert comment["user_name"] == "Casey User"

        public = await client.get(f"/api/v1/blog/posts/{post['slug']}")
        assert public.json()["data"]["comments"] == []

        pending = await client.get(
            "/api/v1/blog/admin/comments", params={"approved": "false"}, headers=admin_headers,
        )
        assert [c["id"] for c in pending.json()["data"]["items"]] == [comment["id"]]

        approved = await client.put(
            f"/api/v1/blog/admin/comments/{comment['id']}", json={"approved": True},
            headers=admin_headers,
        )
        assert approved.json()["data"]["approved"] is True

        public = await client.get(f"/api/v1/blog/posts/{post['slug']}")
        assert [c["id"] for c in public.json()["data"]["comments"]] == [comment["id"]]

        deleted = await client.delete(
            f"/api/v1/blog/admin/comments/{comment['id']}", headers=admin_headers,
        )
        assert deleted.status_code == 200

    async def test_comment_requires_login(self, client, admin_headers):
        post = await _create_post(client, admin_headers)
        resp = await client.post(
            f"/api/v1/blog/posts/{post['slug']}/comments", json={"content": "Hi"},
        )
        assert resp.status_code == 401

    async def test_blank_comment_rejected(self, client, admin_headers, customer_headers):
        post = await _create_post(client, admin_headers)
        resp = await client.post(
            f"/api/v1/blog/posts/{post['slug']}/comments", json={"content": "   "},
            headers=customer_headers,
        )
        assert resp.status_code == 400

    async def test_no_comments_on_drafts(self, client, admin_headers, customer_headers):
        await _create_post(client, admin_headers, title="Quiet Draft", published=False)
        resp = await client.post(
            "/api/v1/blog/posts/quiet-draft/comments", json={"content": "Hello"},
            headers=customer_headers,
        )
        assert resp.status_code == 404


class TestBlogAdmin:

    async def test_customer_cannot_manage(self, client, customer_headers):
        resp = await client.get("/api/v1/blog/admin/posts", headers=customer_headers)
        assert resp.status_code == 403

    async def test_duplicate_title_conflict(self, client, admin_headers):
        await _create_post(client, admin_headers)
        resp = await client.post(
            "/api/v1/blog/admin/posts",
            json={"title": "Ten days in the fjords!", "content": "Again"},
            headers=admin_headers,
        )
        assert resp.status_code == 409

    async def test_publish_and_unpublish(self, client, admin_headers):
        post = await _create_post(client, admin_headers, published=False)
        assert post["published_at"] is None

        resp = await client.put(
            f"/api/v1/blog/admin/posts/{post['id']}", json={"published": True}, headers=admin_headers,
        )
        assert resp.json()["data"]["published_at"] is not None

        resp = await client.put(
            f"/api/v1/blog/admin/posts/{post['id']}", json={"published": False}, headers=admin_headers,
        )
        assert resp.json()["data"]["published"] is False
        assert resp.json()["data"]["published_at"] is None

    async def test_retitle_changes_slug(self, client, admin_headers):
        post = await _create_post(client, admin_headers)
        resp = await client.put(
            f"/api/v1/blog/admin/posts/{post['id']}", json={"title": "Fjords Revisited"},
            headers=admin_headers,
        )
        assert resp.json()["data"]["slug"] == "fjords-revisited"

    async def test_admin_list_and_delete(self, client, admin_headers):
        post = await _create_post(client, admin_headers, published=False)
        listing = await client.get(
            "/api/v1/blog/admin/posts", params={"published": "false"}, headers=admin_headers,
        )
        assert [p["id"] for p in listing.json()["data"]["items"]] == [post["id"]]

        resp = await client.delete(f"/api/v1/blog/admin/posts/{post['id']}", headers=admin_headers)
        assert resp.status_code == 200
        missing = await client.get(f"/api/v1/blog/admin/posts/{post['id']}", headers=admin_headers)
        assert missing.status_code == 404
