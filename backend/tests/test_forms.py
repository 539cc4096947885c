"""Tests for the form lifecycle: create, read, partial update, and both delete paths."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from app.core.config import settings
from app.models.field_response import FieldResponse
from app.models.form import Form
from app.models.form_collaborator import FormCollaborator
from app.models.form_field import FormField
from app.models.form_response import FormResponse
from app.models.user import User
from app.schemas.auth import Identity
from app.services.auth import create_access_token, hash_password
from app.services.exceptions import (
    Forbidden,
    FormHasResponses,
    InsufficientPermission,
    NotFound,
    Unauthenticated,
)
from app.services.forms import (
    create_form,
    delete_form,
    delete_form_with_all_data,
    get_form,
    get_form_context,
    list_user_forms,
    update_form,
)

BASE_URL = "/api/v1/forms"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _identity(email):
    return Identity(subject=f"sub-{email}", email=email)


def _count(db, model, form_id):
    return db.execute(
        select(func.count()).select_from(model).where(model.form_id == form_id)
    ).scalar_one()


def _add_field(db, form, name, order):
    field = FormField(form_id=form.id, name=name, type="text", order=order, required=False)
    db.add(field)
    db.commit()
    return field


def _add_response(db, form, field, value="x"):
    submission = FormResponse(form_id=form.id, user_email="r@example.com")
    db.add(submission)
    db.flush()
    db.add(
        FieldResponse(
            form_id=form.id,
            field_id=field.id,
            form_response_id=submission.id,
            user_email="r@example.com",
            response=value,
        )
    )
    db.commit()
    return submission


def _add_collaborator(db, form, email, role="editor", status="accepted"):
    db.add(
        FormCollaborator(
            form_id=form.id,
            user_email=email,
            role=role,
            status=status,
            invited_by=form.created_by,
            invited_at=datetime.now(timezone.utc),
        )
    )
    db.commit()
    return _identity(email)


# ===========================================================================
# create / read
# ===========================================================================


class TestCreateForm:
    def test_defaults(self, db, owner):
        form = create_form(db, owner)
        assert form.created_by == owner.email
        assert form.name == settings.DEFAULT_FORM_NAME
        assert form.description == settings.DEFAULT_FORM_DESCRIPTION
        assert not form.auth_required
        assert not form.one_time
        assert not form.default_required
        assert form.created_at is not None

    def test_anonymous_rejected(self, db):
        with pytest.raises(Unauthenticated):
            create_form(db, None)

    def test_each_call_creates_a_new_form(self, db, owner):
        assert create_form(db, owner).id != create_form(db, owner).id


class TestReadForm:
    def test_get_form(self, db, form):
        assert get_form(db, form.id).name == "Feedback"

    def test_get_missing(self, db):
        with pytest.raises(NotFound, match="Form not found"):
            get_form(db, uuid.uuid4())

    def test_context_has_ordered_fields(self, db, form):
        _add_field(db, form, "second", 2)
        _add_field(db, form, "first", 1)
        loaded, fields = get_form_context(db, form.id)
        assert loaded.id == form.id
        assert [f.name for f in fields] == ["first", "second"]

    def test_list_user_forms_only_own(self, db, owner, stranger):
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        older = Form(created_by=owner.email, name="older", created_at=now - timedelta(days=1))
        newer = Form(created_by=owner.email, name="newer", created_at=now)
        theirs = Form(created_by=stranger.email, name="theirs")
        db.add_all([older, newer, theirs])
        db.commit()
        assert [f.name for f in list_user_forms(db, owner)] == ["newer", "older"]

    def test_list_user_forms_excludes_collaborations(self, db, form):
        editor = _add_collaborator(db, form, "editor@example.com")
        assert list_user_forms(db, editor) == []


# ===========================================================================
# update
# ===========================================================================


class TestUpdateForm:
    def test_owner_updates(self, db, form, owner):
        updated = update_form(db, form.id, owner, {"name": "Survey", "auth_required": True})
        assert updated.name == "Survey"
        assert updated.auth_required is True
        assert updated.description == "Tell us"

    def test_editor_updates(self, db, form):
        editor = _add_collaborator(db, form, "editor@example.com")
        assert update_form(db, form.id, editor, {"one_time": True}).one_time is True

    def test_viewer_denied(self, db, form):
        viewer = _add_collaborator(db, form, "viewer@example.com", role="viewer")
        with pytest.raises(InsufficientPermission, match="Required: editor, You have: viewer"):
            update_form(db, form.id, viewer, {"name": "Nope"})

    def test_pending_editor_denied(self, db, form):
        pending = _add_collaborator(db, form, "editor@example.com", status="pending")
        with pytest.raises(Forbidden):
            update_form(db, form.id, pending, {"name": "Nope"})

    def test_stranger_denied_and_form_unchanged(self, db, form, stranger):
        with pytest.raises(Forbidden):
            update_form(db, form.id, stranger, {"name": "Hijacked"})
        db.refresh(form)
        assert form.name == "Feedback"

    def test_explicit_none_clears_value(self, db, form, owner):
        updated = update_form(db, form.id, owner, {"description": None, "name": "Survey"})
        assert updated.description is None
        assert updated.name == "Survey"

    def test_false_is_written(self, db, form, owner):
        update_form(db, form.id, owner, {"auth_required": True})
        assert update_form(db, form.id, owner, {"auth_required": False}).auth_required is False

    def test_same_update_twice_is_stable(self, db, form, owner):
        changes = {"name": "Survey", "default_required": True}
        first = update_form(db, form.id, owner, changes)
        snapshot = (first.name, first.description, first.default_required)
        second = update_form(db, form.id, owner, changes)
        assert (second.name, second.description, second.default_required) == snapshot

    def test_unknown_keys_ignored(self, db, form, owner):
        updated = update_form(db, form.id, owner, {"created_by": "evil@example.com"})
        assert updated.created_by == owner.email

    def test_anonymous_rejected(self, db, form):
        with pytest.raises(Unauthenticated):
            update_form(db, form.id, None, {"name": "x"})


# ===========================================================================
# delete
# ===========================================================================


class TestDeleteForm:
    def test_deletes_form_and_fields(self, db, form, owner):
        _add_field(db, form, "a", 1)
        _add_field(db, form, "b", 2)
        form_id = form.id

        delete_form(db, form_id, owner)

        assert db.get(Form, form_id) is None
        assert _count(db, FormField, form_id) == 0

    def test_deletes_collaborations_in_every_state(self, db, form, owner):
        _add_field(db, form, "a", 1)
        _add_collaborator(db, form, "editor@example.com")
        _add_collaborator(db, form, "viewer@example.com", role="viewer", status="pending")
        _add_collaborator(db, form, "gone@example.com", status="rejected")
        form_id = form.id

        delete_form(db, form_id, owner)

        assert db.get(Form, form_id) is None
        assert _count(db, FormCollaborator, form_id) == 0

    def test_refuses_when_responses_exist(self, db, form, owner):
        field = _add_field(db, form, "a", 1)
        _add_response(db, form, field)

        with pytest.raises(FormHasResponses, match="Form has responses"):
            delete_form(db, form.id, owner)
        assert db.get(Form, form.id) is not None
        assert _count(db, FormField, form.id) == 1

    def test_editor_cannot_delete(self, db, form):
        editor = _add_collaborator(db, form, "editor@example.com")
        with pytest.raises(InsufficientPermission):
            delete_form(db, form.id, editor)

    def test_missing_form(self, db, owner):
        with pytest.raises(NotFound):
            delete_form(db, uuid.uuid4(), owner)


class TestDeleteFormWithAllData:
    def test_cascades_everything(self, db, form, owner):
        field = _add_field(db, form, "a", 1)
        _add_response(db, form, field)
        _add_response(db, form, field)
        _add_collaborator(db, form, "editor@example.com")
        form_id = form.id

        delete_form_with_all_data(db, form_id, owner)

        assert db.get(Form, form_id) is None
        for model in (FieldResponse, FormResponse, FormField, FormCollaborator):
            assert _count(db, model, form_id) == 0

    def test_other_forms_untouched(self, db, form, owner):
        other = Form(created_by=owner.email, name="Other")
        db.add(other)
        db.commit()
        field = _add_field(db, other, "kept", 1)
        _add_response(db, other, field)

        delete_form_with_all_data(db, form.id, owner)

        assert _count(db, FormField, other.id) == 1
        assert _count(db, FormResponse, other.id) == 1

    def test_editor_cannot_delete(self, db, form):
        editor = _add_collaborator(db, form, "editor@example.com")
        with pytest.raises(InsufficientPermission):
            delete_form_with_all_data(db, form.id, editor)
        assert db.get(Form, form.id) is not None


# ===========================================================================
# API
# ===========================================================================


def _create_user(db, email):
    user = User(
        first_name="Test",
        last_name="User",
        username=email.split("@")[0],
        email=email,
        password_hash=hash_password("strongpassword123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _auth_header(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


class TestFormsAPI:
    def test_create_and_fetch(self, client, db):
        user = _create_user(db, "owner@example.com")
        headers = _auth_header(user)

        resp = client.post(f"{BASE_URL}/", headers=headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["created_by"] == "owner@example.com"
        assert data["name"] == settings.DEFAULT_FORM_NAME

        resp = client.get(f"{BASE_URL}/{data['id']}")
        assert resp.status_code == 200
        assert resp.json()["id"] == data["id"]

        mine = client.get(f"{BASE_URL}/mine", headers=headers)
        assert [f["id"] for f in mine.json()] == [data["id"]]

    def test_create_requires_auth(self, client):
        assert client.post(f"{BASE_URL}/").status_code == 401

    def test_get_missing_is_404(self, client):
        assert client.get(f"{BASE_URL}/{uuid.uuid4()}").status_code == 404

    def test_context(self, client, db, form):
        _add_field(db, form, "Email", 1)
        resp = client.get(f"{BASE_URL}/{form.id}/context")
        assert resp.status_code == 200
        body = resp.json()
        assert body["form"]["name"] == "Feedback"
        assert [f["name"] for f in body["fields"]] == ["Email"]

    def test_patch_only_touches_sent_keys(self, client, db, form):
        user = _create_user(db, "owner@example.com")
        resp = client.patch(f"{BASE_URL}/{form.id}", json={"one_time": True}, headers=_auth_header(user))
        assert resp.status_code == 200
        assert resp.json()["one_time"] is True
        assert resp.json()["name"] == "Feedback"

    def test_patch_null_clears_description(self, client, db, form):
        user = _create_user(db, "owner@example.com")
        resp = client.patch(f"{BASE_URL}/{form.id}", json={"description": None}, headers=_auth_header(user))
        assert resp.status_code == 200
        assert resp.json()["description"] is None
        assert resp.json()["name"] == "Feedback"

    def test_patch_by_stranger_is_403(self, client, db, form):
        user = _create_user(db, "stranger@example.com")
        resp = client.patch(f"{BASE_URL}/{form.id}", json={"name": "x"}, headers=_auth_header(user))
        assert resp.status_code == 403

    def test_delete_shared_form(self, client, db, form):
        user = _create_user(db, "owner@example.com")
        _add_collaborator(db, form, "friend@example.com", role="viewer", status="pending")

        resp = client.delete(f"{BASE_URL}/{form.id}", headers=_auth_header(user))
        assert resp.status_code == 204
        assert client.get(f"{BASE_URL}/{form.id}").status_code == 404

    def test_delete_with_responses_is_409(self, client, db, form):
        user = _create_user(db, "owner@example.com")
        field = _add_field(db, form, "a", 1)
        _add_response(db, form, field)

        resp = client.delete(f"{BASE_URL}/{form.id}", headers=_auth_header(user))
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Form has responses - cannot delete"

        resp = client.delete(f"{BASE_URL}/{form.id}/all", headers=_auth_header(user))
        assert resp.status_code == 204
        assert client.get(f"{BASE_URL}/{form.id}").status_code == 404
