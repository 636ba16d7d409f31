"""Integration tests for the article lifecycle against SQLite."""

import base64
import uuid

import pytest
from sqlalchemy import func, select

from otsnews.engines.articles.article_service import ArticleInput, ArticleService, AttachmentInput
from otsnews.engines.comments.comment_service import CommentService
from otsnews.kernel.errors import NotFoundError, PermissionDeniedError, ValidationError
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.models import (
    Article,
    ArticleStatus,
    ArticleTag,
    Attachment,
    Comment,
    EventType,
    Notification,
    NotificationType,
)


def article_input(**overrides) -> ArticleInput:
    data = {
        "title": "ServiceNow Implementation Update",
        "content": "<p>Migration <strong>complete</strong>.</p>",
        "excerpt": "Key updates for Incident Management.",
        "section_id": "euc",
        "subsection_id": "incident-management",
        "tags": ["ServiceNow", "Migration"],
    }
    data.update(overrides)
    return ArticleInput(**data)


async def count(session, model, *criteria) -> int:
    return await session.scalar(select(func.count()).select_from(model).where(*criteria))


@pytest.mark.asyncio
class TestCreate:

    async def test_editor_publishes_in_granted_section(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)

        article = await service.create(article_input(), author=world.editor)

        assert article.status == ArticleStatus.PUBLISHED
        assert article.author_id == world.editor.id
        assert article.author_name == "Eddie Editor"
        assert article.tag_names == ["migration", "servicenow"]

    async def test_tag_order_survives_reload(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(tags=["VDI", "Benefits", "migration"]), author=world.admin)
        created = list(article.tag_names)

        await db_session.refresh(article, ["tags"])

        assert created == article.tag_names == ["benefits", "migration", "vdi"]

        updated = await service.update(article.id, article_input(tags=["zeta", "Alpha", "vdi"]), requester=world.admin)
        assert updated.tag_names == ["alpha", "vdi", "zeta"]

    async def test_publication_notifies_everyone_but_the_author(self, db_session, world, settings):
        article = await ArticleService(db_session, settings=settings).create(
            article_input(), author=world.editor
        )

        result = await db_session.execute(
            select(Notification).where(Notification.article_id == article.id)
        )
        notifications = result.scalars().all()

        assert {n.user_id for n in notifications} == {world.admin.id, world.reader.id, world.guest.id}
        assert all(n.type == NotificationType.NEW_ARTICLE for n in notifications)
        assert notifications[0].message == 'Eddie Editor published "ServiceNow Implementation Update"'
        assert not any(n.read for n in notifications)

    async def test_draft_creates_no_notifications(self, db_session, world, settings):
        article = await ArticleService(db_session, settings=settings).create(
            article_input(status=ArticleStatus.DRAFT), author=world.editor
        )

        assert await count(db_session, Notification, Notification.article_id == article.id) == 0

    async def test_editor_role_without_grant_is_denied(self, db_session, world, settings):
        with pytest.raises(PermissionDeniedError):
            await ArticleService(db_session, settings=settings).create(
                article_input(section_id="hr", subsection_id="benefits"),
                author=world.editor,
            )

    async def test_plain_user_and_guest_are_denied(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)

        with pytest.raises(PermissionDeniedError):
            await service.create(article_input(), author=world.reader)
        with pytest.raises(PermissionDeniedError):
            await service.create(article_input(), author=world.guest)

    async def test_blank_title_rejected(self, db_session, world, settings):
        with pytest.raises(ValidationError):
            await ArticleService(db_session, settings=settings).create(
                article_input(title="   "), author=world.admin
            )

    async def test_blank_excerpt_gets_placeholder(self, db_session, world, settings):
        article = await ArticleService(db_session, settings=settings).create(
            article_input(excerpt=""), author=world.admin
        )

        assert article.excerpt == "No excerpt provided."

    async def test_unknown_section_is_not_found(self, db_session, world, settings):
        with pytest.raises(NotFoundError):
            await ArticleService(db_session, settings=settings).create(
                article_input(section_id="nope", subsection_id=None), author=world.admin
            )

    async def test_subsection_must_belong_to_section(self, db_session, world, settings):
        with pytest.raises(ValidationError):
            await ArticleService(db_session, settings=settings).create(
                article_input(section_id="euc", subsection_id="benefits"), author=world.admin
            )

    async def test_script_never_reaches_storage(self, db_session, world, settings):
        article = await ArticleService(db_session, settings=settings).create(
            article_input(content="<p>ok</p><script>alert(1)</script>"), author=world.admin
        )

        assert "<script" not in article.content

    async def test_creation_is_audited(self, db_session, world, settings):
        article = await ArticleService(db_session, settings=settings).create(
            article_input(), author=world.editor
        )

        history = await EventStore(db_session).get_entity_history("article", article.id)
        events = {EventType(e.event_type) for e in history}

        assert EventType.ARTICLE_CREATED in events
        assert EventType.ARTICLE_PUBLISHED in events


@pytest.mark.asyncio
class TestUpdate:

    async def test_draft_to_published_notifies_exactly_once(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(status=ArticleStatus.DRAFT), author=world.editor)

        await service.update(article.id, article_input(status=ArticleStatus.PUBLISHED), requester=world.editor)
        await service.update(article.id, article_input(title="Edited", status=ArticleStatus.PUBLISHED), requester=world.editor)
        await service.update(article.id, article_input(status=ArticleStatus.DRAFT), requester=world.editor)
        await service.update(article.id, article_input(), requester=world.editor)

        assert await count(db_session, Notification, Notification.article_id == article.id) == 3

    async def test_publishing_refreshes_timestamp(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(status=ArticleStatus.DRAFT), author=world.editor)
        drafted_at = article.timestamp

        updated = await service.update(article.id, article_input(status=ArticleStatus.PUBLISHED), requester=world.editor)

        assert updated.timestamp >= drafted_at

    async def test_status_none_keeps_current(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(status=ArticleStatus.DRAFT), author=world.editor)

        updated = await service.update(article.id, article_input(status=None), requester=world.editor)

        assert updated.status == ArticleStatus.DRAFT

    async def test_tags_are_replaced_not_merged(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(tags=["a", "b"]), author=world.editor)

        updated = await service.update(article.id, article_input(tags=["B", "c", "c"]), requester=world.editor)

        assert updated.tag_names == ["b", "c"]
        assert await count(db_session, ArticleTag, ArticleTag.article_id == article.id) == 2

    async def test_section_editor_edits_others_articles(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(), author=world.admin)

        with pytest.raises(PermissionDeniedError):
            await service.update(article.id, article_input(title="Hijack"), requester=world.reader)
        updated = await service.update(article.id, article_input(title="Fixed typo"), requester=world.editor)

        assert updated.title == "Fixed typo"
        assert updated.author_id == world.admin.id
        assert updated.author_name == "Alice Admin"

    async def test_author_may_edit_without_grant(self, db_session, world, settings):
        from otsnews.kernel.models import SectionEditorGrant

        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(), author=world.editor)
        grant = await db_session.get(SectionEditorGrant, (world.editor.id, "euc"))
        await db_session.delete(grant)
        await db_session.flush()

        updated = await service.update(article.id, article_input(title="Still mine"), requester=world.editor)

        assert updated.title == "Still mine"

    async def test_missing_article(self, db_session, world, settings):
        with pytest.raises(NotFoundError):
            await ArticleService(db_session, settings=settings).update(
                uuid.uuid4(), article_input(), requester=world.admin
            )


@pytest.mark.asyncio
class TestDelete:

    async def test_cascade_removes_everything_attached(self, db_session, world, settings):
        articles = ArticleService(db_session, settings=settings)
        comments = CommentService(db_session, settings=settings)
        doomed = await articles.create(article_input(), author=world.editor)
        survivor = await articles.create(article_input(title="Other"), author=world.editor)
        await articles.add_attachment(
            doomed.id,
            AttachmentInput(filename="notes.txt", mime_type="text/plain", data=base64.b64encode(b"hi").decode()),
            requester=world.editor,
        )
        top = await comments.post(doomed.id, world.reader, "First!")
        await comments.post(doomed.id, world.admin, "Reply", parent_id=top.id)
        await comments.post(survivor.id, world.reader, "Elsewhere")

        await articles.delete(doomed.id, requester=world.editor)

        assert await count(db_session, Comment, Comment.article_id == doomed.id) == 0
        assert await count(db_session, Notification, Notification.article_id == doomed.id) == 0
        assert await count(db_session, ArticleTag, ArticleTag.article_id == doomed.id) == 0
        assert await count(db_session, Attachment, Attachment.article_id == doomed.id) == 0
        assert await count(db_session, Comment, Comment.article_id == survivor.id) == 1
        assert await count(db_session, Notification, Notification.article_id == survivor.id) > 0

    async def test_failed_delete_rolls_back_everything(self, database, api_world, settings, monkeypatch):
        async with database.session() as session:
            article = await ArticleService(session, settings=settings).create(
                article_input(), author=api_world.editor
            )
            await CommentService(session, settings=settings).post(article.id, api_world.reader, "Kept")

        async def failing_log(self, **kwargs):
            raise RuntimeError("audit log unavailable")

        monkeypatch.setattr(EventStore, "log", failing_log)
        with pytest.raises(RuntimeError):
            async with database.session() as session:
                await ArticleService(session, settings=settings).delete(article.id, requester=api_world.admin)
        monkeypatch.undo()

        async with database.session() as session:
            assert await session.get(Article, article.id) is not None
            assert await count(session, Comment, Comment.article_id == article.id) == 1
            # three publication notices plus the comment notice to the author
            assert await count(session, Notification, Notification.article_id == article.id) == 4
            assert await count(session, ArticleTag, ArticleTag.article_id == article.id) == 2

    async def test_author_without_section_rights_cannot_delete(self, db_session, world, settings):
        articles = ArticleService(db_session, settings=settings)
        article = await articles.create(article_input(), author=world.admin)

        with pytest.raises(PermissionDeniedError):
            await articles.delete(article.id, requester=world.reader)

    async def test_missing_article(self, db_session, world, settings):
        with pytest.raises(NotFoundError):
            await ArticleService(db_session, settings=settings).delete(uuid.uuid4(), requester=world.admin)


@pytest.mark.asyncio
class TestReads:

    async def test_drafts_hidden_from_others(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        draft = await service.create(article_input(status=ArticleStatus.DRAFT), author=world.editor)

        assert draft.id in {a.id for a in await service.list_visible(world.editor)}
        assert draft.id in {a.id for a in await service.list_visible(world.admin)}
        assert draft.id not in {a.id for a in await service.list_visible(world.reader)}
        assert draft.id not in {a.id for a in await service.list_visible(None)}
        with pytest.raises(NotFoundError):
            await service.get(draft.id, viewer=world.reader)

    async def test_newest_first(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        first = await service.create(article_input(title="First"), author=world.admin)
        second = await service.create(article_input(title="Second"), author=world.admin)

        listed = [a.id for a in await service.list_visible(world.reader)]

        assert listed.index(second.id) < listed.index(first.id)

    async def test_filters(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        euc = await service.create(article_input(tags=["Team Building"]), author=world.admin)
        hr = await service.create(
            article_input(title="Benefits", section_id="hr", subsection_id="benefits", tags=["hr"]),
            author=world.admin,
        )

        assert [a.id for a in await service.list_visible(None, section_id="hr")] == [hr.id]
        assert [a.id for a in await service.list_visible(None, subsection_id="incident-management")] == [euc.id]
        assert [a.id for a in await service.list_visible(None, tag="team building")] == [euc.id]
        assert [a.id for a in await service.list_visible(None, query="BENEFITS")] == [hr.id]

    async def test_search_is_case_insensitive_and_published_only(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        published = await service.create(article_input(content="<p>The new VDI rollout</p>"), author=world.admin)
        await service.create(article_input(content="<p>vdi draft</p>", status=ArticleStatus.DRAFT), author=world.admin)

        results = await service.search("vDi")

        assert [a.id for a in results] == [published.id]
        assert await service.search("   ") == []

    async def test_search_treats_wildcards_literally(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        await service.create(article_input(title="Plain"), author=world.admin)

        assert await service.search("%") == []

    async def test_search_matches_escaped_content(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(
            article_input(title="Budget", excerpt="Annual plan", content="<p>R&D budget for 2026</p>"),
            author=world.admin,
        )

        assert "R&amp;D" in article.content
        assert [a.id for a in await service.search("r&d")] == [article.id]

    async def test_list_tags_distinct_sorted(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        await service.create(article_input(tags=["Migration", "vdi"]), author=world.admin)
        await service.create(article_input(tags=["migration", "Benefits"]), author=world.admin)

        assert await service.list_tags() == ["benefits", "migration", "vdi"]


@pytest.mark.asyncio
class TestAttachments:

    async def test_add_and_remove(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(), author=world.editor)

        attachment = await service.add_attachment(
            article.id,
            AttachmentInput(filename="plan.pdf", mime_type="application/pdf", data=base64.b64encode(b"%PDF").decode()),
            requester=world.editor,
        )
        assert [a.filename for a in article.attachments] == ["plan.pdf"]

        await service.delete_attachment(attachment.id, requester=world.editor)
        assert await count(db_session, Attachment, Attachment.article_id == article.id) == 0

    async def test_rejects_non_base64(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(), author=world.editor)

        with pytest.raises(ValidationError):
            await service.add_attachment(
                article.id,
                AttachmentInput(filename="x.bin", data="not base64!!"),
                requester=world.editor,
            )

    async def test_reader_cannot_attach(self, db_session, world, settings):
        service = ArticleService(db_session, settings=settings)
        article = await service.create(article_input(), author=world.editor)

        with pytest.raises(PermissionDeniedError):
            await service.add_attachment(
                article.id,
                AttachmentInput(filename="x.txt", data=base64.b64encode(b"x").decode()),
                requester=world.reader,
            )
