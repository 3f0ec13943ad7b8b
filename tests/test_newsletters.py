import pytest

from newsroom.errors import InvalidInput, NotFound
from newsroom.models import Newsletter, NewsletterSchedule
from newsroom.newsletters import NewsletterService
from newsroom.schemas import NewsletterCreate, NewsletterUpdate


@pytest.fixture
def service(db, add_user):
    add_user(id="u1")
    return NewsletterService(db)


class TestNewsletterService:
    def test_create_defaults(self, service):
        newsletter = service.create("u1", NewsletterCreate(title="  Morning Brief "))

        assert newsletter.title == "Morning Brief"
        assert newsletter.schedule == NewsletterSchedule.WEEKLY
        assert newsletter.is_active is True
        assert newsletter.subscriber_count == 0
        assert newsletter.categories == []

    def test_create_blank_title_rejected(self, service):
        with pytest.raises(InvalidInput):
            service.create("u1", NewsletterCreate(title=" "))

    def test_create_for_unknown_user(self, service):
        with pytest.raises(NotFound):
            service.create("ghost", NewsletterCreate(title="Brief"))

    def test_list_only_users_newsletters(self, service, add_user):
        add_user(id="u2")
        service.create("u1", NewsletterCreate(title="Mine"))
        service.create("u2", NewsletterCreate(title="Theirs"))

        assert [n.title for n in service.list_for_user("u1")] == ["Mine"]

    def test_partial_update(self, service):
        created = service.create("u1", NewsletterCreate(
            title="Brief", categories=["technology"], schedule=NewsletterSchedule.DAILY,
        ))

        updated = service.update(created.id, NewsletterUpdate(is_active=False))

        assert updated.is_active is False
        assert updated.title == "Brief"
        assert updated.categories == ["technology"]
        assert updated.schedule == NewsletterSchedule.DAILY

    def test_update_null_required_field_rejected(self, service):
        created = service.create("u1", NewsletterCreate(title="Brief"))
        with pytest.raises(InvalidInput):
            service.update(created.id, NewsletterUpdate(schedule=None))

    def test_update_unknown(self, service):
        with pytest.raises(NotFound):
            service.update("missing", NewsletterUpdate(title="x"))

    def test_delete(self, db, service):
        created = service.create("u1", NewsletterCreate(title="Brief"))

        service.delete(created.id)

        assert db.query(Newsletter).count() == 0

    def test_delete_unknown(self, service):
        with pytest.raises(NotFound):
            service.delete("missing")
