"""Unit tests for the access policy (no database)."""

import uuid

import pytest

from otsnews.kernel.errors import PermissionDeniedError
from otsnews.kernel.models.article import Article, ArticleStatus
from otsnews.kernel.models.section import Section
from otsnews.kernel.models.user import User, UserRole
from otsnews.kernel.permissions.policy import ANONYMOUS, AccessPolicy


def _user(role: UserRole) -> User:
    return User(id=uuid.uuid4(), name=role.value.title(), email=f"{role.value}@example.com", role=role)


def _article(author: User, section_id: str = "euc", status: ArticleStatus = ArticleStatus.PUBLISHED) -> Article:
    return Article(
        id=uuid.uuid4(),
        title="Title",
        section_id=section_id,
        author_id=author.id,
        author_name=author.name,
        status=status,
    )


@pytest.fixture
def admin():
    return AccessPolicy(user=_user(UserRole.ADMIN))


@pytest.fixture
def euc_editor():
    return AccessPolicy(user=_user(UserRole.EDITOR), granted_section_ids=frozenset({"euc"}))


@pytest.fixture
def reader():
    return AccessPolicy(user=_user(UserRole.USER))


@pytest.fixture
def guest():
    return AccessPolicy(user=_user(UserRole.GUEST))


class TestSectionEditing:
    
    def test_admin_edits_everywhere_without_grants(self, admin):
        assert admin.can_edit_section("euc")
        assert admin.can_edit_section("anything")
    
    def test_editor_role_alone_is_not_enough(self):
        policy = AccessPolicy(user=_user(UserRole.EDITOR))
        
        assert not policy.can_edit_section("euc")
        assert not policy.can_edit_any()
    
    def test_grant_is_per_section(self, euc_editor):
        assert euc_editor.can_edit_section("euc")
        assert not euc_editor.can_edit_section("hr")
        assert euc_editor.can_edit_any()
    
    def test_plain_user_with_grant_can_edit(self):
        policy = AccessPolicy(user=_user(UserRole.USER), granted_section_ids=frozenset({"hr"}))
        
        assert policy.can_edit_section("hr")
    
    def test_guest_never_edits_even_with_grant(self):
        policy = AccessPolicy(user=_user(UserRole.GUEST), granted_section_ids=frozenset({"euc"}))
        
        assert not policy.can_edit_section("euc")
        assert not policy.can_edit_any()
    
    def test_anonymous_never_edits(self):
        assert not ANONYMOUS.can_edit_section("euc")
        assert not ANONYMOUS.can_edit_any()
    
    def test_editable_sections_keep_registry_order(self):
        sections = [Section(id="euc", title="EUC"), Section(id="hr", title="HR"), Section(id="general", title="General")]
        policy = AccessPolicy(user=_user(UserRole.USER), granted_section_ids=frozenset({"general", "euc"}))
        
        assert [s.id for s in policy.editable_sections(sections)] == ["euc", "general"]
    
    def test_admin_gets_every_section(self, admin):
        sections = [Section(id="euc", title="EUC"), Section(id="hr", title="HR")]
        
        assert admin.editable_sections(sections) == sections


class TestArticleVisibility:
    
    def test_published_visible_to_everyone(self, reader, guest):
        article = _article(_user(UserRole.ADMIN))
        
        assert ANONYMOUS.can_view_article(article)
        assert guest.can_view_article(article)
        assert reader.can_view_article(article)
    
    def test_draft_visible_to_author_and_admin_only(self, admin, euc_editor):
        author = euc_editor.user
        draft = _article(author, status=ArticleStatus.DRAFT)
        
        assert euc_editor.can_view_article(draft)
        assert admin.can_view_article(draft)
        assert not ANONYMOUS.can_view_article(draft)
        other_editor = AccessPolicy(user=_user(UserRole.EDITOR), granted_section_ids=frozenset({"euc"}))
        assert not other_editor.can_view_article(draft)
    
    def test_status_loaded_as_plain_string(self, reader):
        article = _article(_user(UserRole.ADMIN))
        article.status = "published"
        
        assert reader.can_view_article(article)


class TestArticleMutation:
    
    def test_author_can_update_outside_granted_sections(self, reader):
        article = _article(reader.user, section_id="hr")
        
        assert reader.can_update_article(article, "hr")
    
    def test_section_editor_can_update_others_articles(self, euc_editor):
        article = _article(_user(UserRole.USER), section_id="euc")
        
        assert euc_editor.can_update_article(article, "euc")
        assert not euc_editor.can_update_article(article, "hr")
    
    def test_stranger_cannot_update(self, reader):
        article = _article(_user(UserRole.USER))
        
        assert not reader.can_update_article(article, article.section_id)
        assert not ANONYMOUS.can_update_article(article, article.section_id)
    
    def test_delete_needs_section_rights(self, admin, euc_editor, reader):
        article = _article(reader.user, section_id="euc")
        
        assert admin.can_delete_article(article)
        assert euc_editor.can_delete_article(article)
        assert not reader.can_delete_article(article)


class TestComments:
    
    def test_guest_and_anonymous_cannot_comment(self, guest, reader):
        assert reader.can_comment()
        assert not guest.can_comment()
        assert not ANONYMOUS.can_comment()
    
    def test_moderation_follows_section_rights(self, euc_editor, reader):
        article = _article(reader.user, section_id="euc")
        
        assert euc_editor.can_moderate_comment(article)
        assert not reader.can_moderate_comment(article)
        assert not euc_editor.can_moderate_comment(_article(reader.user, section_id="hr"))


class TestRaisingHelpers:
    
    def test_require_admin(self, admin, reader):
        assert admin.require_admin() is admin.user
        with pytest.raises(PermissionDeniedError):
            reader.require_admin()
    
    def test_require_self(self, reader):
        assert reader.require_self(reader.user.id) is reader.user
        with pytest.raises(PermissionDeniedError):
            reader.require_self(uuid.uuid4())
    
    def test_require_comment_for_guest(self, guest):
        with pytest.raises(PermissionDeniedError):
            guest.require_comment()
    
    def test_require_authenticated(self):
        with pytest.raises(PermissionDeniedError):
            ANONYMOUS.require_authenticated()
