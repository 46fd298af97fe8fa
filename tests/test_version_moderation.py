from __future__ import annotations

from datetime import timedelta

import pytest


def _moderator():
    from orbis_moderation.core.security import Actor, Role

    return Actor(id="mod-1", role=Role.MODERATOR)


def test_first_version_approval_publishes_resource_and_notifies():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import AuditLog, Notification, Resource, ResourceStatusHistory, ResourceVersion
    from orbis_moderation.moderation.versions import approve_version
    from tests.utils_bootstrap import create_schema, seed_follow, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db, display_name="Ada")
        fan = seed_user(db)
        seed_follow(db, follower_id=fan, following_id=owner)
        rid = seed_resource(db, owner_user_id=owner, status="PENDING")
        vid = seed_version(db, resource_id=rid, version_number="1.0.0")

        res = approve_version(db, actor=_moderator(), version_id=vid)
        assert res.success is True
        assert res.message == "Version approved and resource published"
        assert res.is_first_version is True
        assert res.resource_published is True

        db.expire_all()
        v = db.get(ResourceVersion, vid)
        r = db.get(Resource, rid)
        assert v.status == "APPROVED"
        assert v.published_at is not None
        assert v.moderated_by_id == "mod-1"
        assert r.status == "APPROVED"
        assert r.published_at is not None
        assert r.latest_version_id == vid

        history = db.query(ResourceStatusHistory).filter(ResourceStatusHistory.resource_id == rid).all()
        assert [(h.from_status, h.to_status, h.reason) for h in history] == [
            ("PENDING", "APPROVED", "First version 1.0.0 approved")
        ]

        audits = [a for a in db.query(AuditLog).filter(AuditLog.event_type == "version.approved").all() if a.context.get("version_id") == vid]
        assert len(audits) == 1
        assert audits[0].context["from_status"] == "PENDING"
        assert audits[0].context["to_status"] == "APPROVED"

        # Eager Celery: fan-out ran after the commit.
        owner_inbox = db.query(Notification).filter(Notification.user_id == owner).all()
        assert [n.type for n in owner_inbox] == ["VERSION_APPROVED"]
        assert owner_inbox[0].data["version_id"] == vid

        fan_inbox = db.query(Notification).filter(Notification.user_id == fan).all()
        assert [n.type for n in fan_inbox] == ["NEW_CREATOR_UPLOAD"]
        assert "Ada" in fan_inbox[0].message


def test_later_version_moves_latest_only():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import Resource, ResourceStatusHistory
    from orbis_moderation.moderation.versions import approve_version
    from orbis_moderation.util.time import now_utc
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        rid = seed_resource(db, owner_user_id=owner, status="APPROVED")
        first_published = now_utc() - timedelta(days=3)
        v1 = seed_version(db, resource_id=rid, version_number="1.0.0", status="APPROVED", published_at=first_published)
        r = db.get(Resource, rid)
        r.latest_version_id = v1
        r.published_at = first_published
        db.commit()

        v2 = seed_version(db, resource_id=rid, version_number="1.1.0")
        res = approve_version(db, actor=_moderator(), version_id=v2)
        assert res.message == "Version approved"
        assert res.is_first_version is False
        assert res.resource_published is False

        db.expire_all()
        r = db.get(Resource, rid)
        assert r.status == "APPROVED"
        assert r.latest_version_id == v2
        assert db.query(ResourceStatusHistory).filter(ResourceStatusHistory.resource_id == rid).count() == 0


def test_latest_version_never_moves_backwards():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import Resource
    from orbis_moderation.moderation.versions import approve_version
    from orbis_moderation.util.time import now_utc
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        rid = seed_resource(db, owner_user_id=owner, status="APPROVED")
        future = seed_version(
            db, resource_id=rid, version_number="2.0.0", status="APPROVED", published_at=now_utc() + timedelta(days=1)
        )
        r = db.get(Resource, rid)
        r.latest_version_id = future
        db.commit()

        older = seed_version(db, resource_id=rid, version_number="1.9.0")
        approve_version(db, actor=_moderator(), version_id=older)

        db.expire_all()
        assert db.get(Resource, rid).latest_version_id == future


def test_first_approval_on_non_pending_resource_does_not_change_its_status():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import Resource
    from orbis_moderation.moderation.versions import approve_version
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        rid = seed_resource(db, owner_user_id=owner, status="SUSPENDED")
        vid = seed_version(db, resource_id=rid)

        res = approve_version(db, actor=_moderator(), version_id=vid)
        assert res.is_first_version is True
        assert res.resource_published is False

        db.expire_all()
        r = db.get(Resource, rid)
        assert r.status == "SUSPENDED"
        assert r.latest_version_id == vid


def test_reject_keeps_resource_status_and_notifies_owner():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import AuditLog, Notification, Resource, ResourceVersion
    from orbis_moderation.moderation.versions import reject_version
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        rid = seed_resource(db, owner_user_id=owner, status="PENDING")
        vid = seed_version(db, resource_id=rid)

        res = reject_version(db, actor=_moderator(), version_id=vid, reason="  Broken build  ")
        assert res.success is True
        assert res.message == "Version rejected"

        db.expire_all()
        v = db.get(ResourceVersion, vid)
        assert v.status == "REJECTED"
        assert v.rejection_reason == "Broken build"
        assert v.published_at is None
        assert db.get(Resource, rid).status == "PENDING"

        audits = [a for a in db.query(AuditLog).filter(AuditLog.event_type == "version.rejected").all() if a.context.get("version_id") == vid]
        assert len(audits) == 1

        inbox = db.query(Notification).filter(Notification.user_id == owner).all()
        assert [n.type for n in inbox] == ["VERSION_REJECTED"]
        assert "Broken build" in inbox[0].message


def test_reject_requires_reason():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.domain.errors import ReasonRequired
    from orbis_moderation.models.tables import ResourceVersion
    from orbis_moderation.moderation.versions import reject_version
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        rid = seed_resource(db, owner_user_id=seed_user(db))
        vid = seed_version(db, resource_id=rid)

        for reason in (None, "", "   "):
            with pytest.raises(ReasonRequired):
                reject_version(db, actor=_moderator(), version_id=vid, reason=reason)

        db.expire_all()
        assert db.get(ResourceVersion, vid).status == "PENDING"


def test_decided_versions_are_not_pending():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.domain.errors import NotFound, NotPending
    from orbis_moderation.moderation.versions import approve_version, reject_version
    from orbis_moderation.util.ids import new_uuid
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        rid = seed_resource(db, owner_user_id=seed_user(db))
        approved = seed_version(db, resource_id=rid, version_number="1.0.0", status="APPROVED")
        rejected = seed_version(db, resource_id=rid, version_number="0.9.0", status="REJECTED")

        with pytest.raises(NotPending):
            approve_version(db, actor=_moderator(), version_id=approved)
        with pytest.raises(NotPending):
            approve_version(db, actor=_moderator(), version_id=rejected)
        # NotPending is reported before a missing reason.
        with pytest.raises(NotPending):
            reject_version(db, actor=_moderator(), version_id=approved, reason=None)
        with pytest.raises(NotFound):
            approve_version(db, actor=_moderator(), version_id=new_uuid())


def test_stale_read_is_caught_under_the_lock():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.domain.errors import NotPending
    from orbis_moderation.models.tables import ResourceVersion
    from orbis_moderation.moderation.versions import approve_version
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as setup:
        rid = seed_resource(setup, owner_user_id=seed_user(setup))
        vid = seed_version(setup, resource_id=rid)

    with SessionLocal() as first:
        # Loaded while still PENDING and kept in this session's identity map.
        assert first.get(ResourceVersion, vid).status == "PENDING"

        with SessionLocal() as second:
            approve_version(second, actor=_moderator(), version_id=vid)

        with pytest.raises(NotPending):
            approve_version(first, actor=_moderator(), version_id=vid)


def test_users_cannot_moderate():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.core.security import Actor
    from orbis_moderation.domain.errors import Forbidden
    from orbis_moderation.moderation.versions import approve_version, reject_version
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        rid = seed_resource(db, owner_user_id=owner)
        vid = seed_version(db, resource_id=rid)

        with pytest.raises(Forbidden):
            approve_version(db, actor=Actor(id=owner), version_id=vid)
        with pytest.raises(Forbidden):
            reject_version(db, actor=Actor(id=owner), version_id=vid, reason="x")


def test_moderate_version_dispatches_on_action():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.domain.errors import InvalidRequest
    from orbis_moderation.models.tables import ResourceVersion
    from orbis_moderation.moderation.versions import moderate_version
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        rid = seed_resource(db, owner_user_id=seed_user(db))
        v1 = seed_version(db, resource_id=rid, version_number="1.0.0")
        v2 = seed_version(db, resource_id=rid, version_number="1.0.1")

        with pytest.raises(InvalidRequest):
            moderate_version(db, actor=_moderator(), version_id=v1, action="PUBLISH")

        assert moderate_version(db, actor=_moderator(), version_id=v1, action="approve").message.startswith("Version approved")
        assert moderate_version(db, actor=_moderator(), version_id=v2, action="REJECT", reason="dupe").message == "Version rejected"

        db.expire_all()
        assert db.get(ResourceVersion, v1).status == "APPROVED"
        assert db.get(ResourceVersion, v2).status == "REJECTED"


def test_dispatch_failure_does_not_undo_the_decision(monkeypatch):
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import ResourceVersion
    from orbis_moderation.moderation import versions
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    class _BrokenTask:
        name = "broken"

        def delay(self, **kwargs):
            raise ConnectionError("broker down")

    monkeypatch.setattr(versions, "deliver_version_approved", _BrokenTask())

    create_schema()
    with SessionLocal() as db:
        rid = seed_resource(db, owner_user_id=seed_user(db))
        vid = seed_version(db, resource_id=rid)

        res = versions.approve_version(db, actor=_moderator(), version_id=vid)
        assert res.success is True

        db.expire_all()
        assert db.get(ResourceVersion, vid).status == "APPROVED"


def test_orphaned_resource_skips_fanout():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import Resource
    from orbis_moderation.moderation.versions import approve_version
    from orbis_moderation.tasks.notification_tasks import deliver_version_approved, deliver_version_rejected
    from orbis_moderation.util.ids import new_uuid
    from tests.utils_bootstrap import create_schema, seed_resource, seed_team, seed_version

    create_schema()
    with SessionLocal() as db:
        team = seed_team(db, owner_id=None)
        rid = seed_resource(db, owner_team_id=team)
        vid = seed_version(db, resource_id=rid)

        res = approve_version(db, actor=_moderator(), version_id=vid)
        assert res.resource_published is True
        db.expire_all()
        assert db.get(Resource, rid).status == "APPROVED"

    assert deliver_version_approved(version_id=vid) == {"ok": True, "skipped": "no_recipient"}
    assert deliver_version_rejected(version_id=vid, reason="x") == {"ok": True, "skipped": "no_recipient"}
    assert deliver_version_approved(version_id=new_uuid()) == {"ok": False, "reason": "not_found"}


def test_muted_owner_still_fans_out_to_followers():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.tasks.notification_tasks import deliver_version_approved
    from tests.utils_bootstrap import create_schema, seed_follow, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db, notif_version_status=False)
        fan = seed_user(db)
        muted_fan = seed_user(db, notif_new_creator_uploads=False)
        seed_follow(db, follower_id=fan, following_id=owner)
        seed_follow(db, follower_id=muted_fan, following_id=owner)
        rid = seed_resource(db, owner_user_id=owner)
        vid = seed_version(db, resource_id=rid, status="APPROVED")

    out = deliver_version_approved(version_id=vid)
    assert out["ok"] is True
    assert out["owner_notified"] is False
    assert out["followers"] == {"delivered": 1, "suppressed": 1, "failed": 0}


def test_pending_queue_flags_first_versions():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.moderation.versions import list_pending_versions
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        fresh = seed_resource(db, owner_user_id=owner)
        live = seed_resource(db, owner_user_id=owner, status="APPROVED")
        seed_version(db, resource_id=live, version_number="1.0.0", status="APPROVED")
        new_on_fresh = seed_version(db, resource_id=fresh)
        new_on_live = seed_version(db, resource_id=live, version_number="1.1.0")

        flags = {p.version.id: p.is_first_version for p in list_pending_versions(db)}
        assert flags[new_on_fresh] is True
        assert flags[new_on_live] is False


def test_submit_version_rules():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.domain.errors import Conflict, Forbidden
    from orbis_moderation.moderation.versions import submit_version
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        stranger = seed_user(db)
        rid = seed_resource(db, owner_user_id=owner, status="DRAFT")
        gone = seed_resource(db, owner_user_id=owner, status="DELETED")

        v = submit_version(db, actor_id=owner, resource_id=rid, version_number="1.0.0", changelog="init")
        assert v.status == "PENDING"

        with pytest.raises(Conflict):
            submit_version(db, actor_id=owner, resource_id=rid, version_number="1.0.0")
        with pytest.raises(Forbidden):
            submit_version(db, actor_id=stranger, resource_id=rid, version_number="2.0.0")
        with pytest.raises(Conflict):
            submit_version(db, actor_id=owner, resource_id=gone, version_number="1.0.0")


def test_rejecting_a_later_version_leaves_the_live_resource_alone():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import Notification, Resource, ResourceStatusHistory
    from orbis_moderation.moderation.versions import approve_version, reject_version, submit_version
    from tests.utils_bootstrap import create_schema, seed_follow, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        fan = seed_user(db)
        seed_follow(db, follower_id=fan, following_id=owner)
        rid = seed_resource(db, owner_user_id=owner, status="PENDING")
        v1 = seed_version(db, resource_id=rid, version_number="1.0.0")

        approve_version(db, actor=_moderator(), version_id=v1)
        v2 = submit_version(db, actor_id=owner, resource_id=rid, version_number="1.1.0").id
        res = reject_version(db, actor=_moderator(), version_id=v2, reason="malware found")
        assert res.message == "Version rejected"

        db.expire_all()
        r = db.get(Resource, rid)
        assert r.status == "APPROVED"
        assert r.latest_version_id == v1
        # Only the first-version publish changed the resource.
        assert db.query(ResourceStatusHistory).filter(ResourceStatusHistory.resource_id == rid).count() == 1

        owner_types = [
            n.type
            for n in db.query(Notification).filter(Notification.user_id == owner).order_by(Notification.created_at.asc())
        ]
        assert owner_types == ["VERSION_APPROVED", "VERSION_REJECTED"]

        fan_types = [n.type for n in db.query(Notification).filter(Notification.user_id == fan)]
        assert fan_types == ["NEW_CREATOR_UPLOAD"]


def test_repeated_rejections_keep_resource_pending():
    from orbis_moderation.core.db import SessionLocal
    from orbis_moderation.models.tables import Resource, ResourceStatusHistory, ResourceVersion
    from orbis_moderation.moderation.versions import reject_version, submit_version
    from tests.utils_bootstrap import create_schema, seed_resource, seed_user, seed_version

    create_schema()
    with SessionLocal() as db:
        owner = seed_user(db)
        rid = seed_resource(db, owner_user_id=owner, status="PENDING")
        v1 = seed_version(db, resource_id=rid, version_number="1.0.0")

        reject_version(db, actor=_moderator(), version_id=v1, reason="missing license")
        v2 = submit_version(db, actor_id=owner, resource_id=rid, version_number="1.0.1").id
        reject_version(db, actor=_moderator(), version_id=v2, reason="still missing license")

        db.expire_all()
        r = db.get(Resource, rid)
        assert r.status == "PENDING"
        assert r.published_at is None
        assert r.latest_version_id is None
        assert [db.get(ResourceVersion, v).status for v in (v1, v2)] == ["REJECTED", "REJECTED"]
        assert db.query(ResourceStatusHistory).filter(ResourceStatusHistory.resource_id == rid).count() == 0
