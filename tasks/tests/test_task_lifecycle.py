from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from applications.models import Application
from applications.services import accept_application
from profiles.models import Profile, TaskerProfile
from tasks.api.serializers import TaskWriteSerializer
from tasks.lifecycle import TransitionConflict, change_status
from tasks.models import Task

User = get_user_model()


def make_user(username, role):
    u = User.objects.create_user(username, f"{username}@example.com", "pass1234")
    Profile.objects.create(user=u, role=role)
    return u, Token.objects.create(user=u)


def make_task(customer, **fields):
    data = {
        "title": "Paint bedroom",
        "description": "Two walls",
        "location_address": "9 Elm Rd",
        "price": Decimal("120.00"),
    }
    data.update(fields)
    return Task.objects.create(customer=customer, **data)


class TaskStatusEndpointTests(APITestCase):
    def setUp(self):
        self.cust, self.cust_tok = make_user("cust", Profile.Role.CUSTOMER)
        self.tasker, self.tasker_tok = make_user("tasker", Profile.Role.TASKER)
        TaskerProfile.objects.create(profile=self.tasker.profile)
        self.outsider, self.outsider_tok = make_user("outsider", Profile.Role.TASKER)

    def post_status(self, task, target, tok):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {tok.key}")
        return self.client.post(reverse("task-status", args=[task.id]), {"status": target}, format="json")

    def test_customer_publishes_draft(self):
        task = make_task(self.cust, status=Task.Status.DRAFT)
        res = self.post_status(task, "open", self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "open")

    def test_customer_cancels_open_task(self):
        task = make_task(self.cust)
        res = self.post_status(task, "cancelled", self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        task.refresh_from_db()
        self.assertEqual(task.status, Task.Status.CANCELLED)
        self.assertIsNone(task.tasker_id)

    def test_assigned_cannot_be_set_directly_409(self):
        task = make_task(self.cust)
        res = self.post_status(task, "assigned", self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_illegal_jump_409(self):
        task = make_task(self.cust)
        res = self.post_status(task, "completed", self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        task.refresh_from_db()
        self.assertEqual(task.status, Task.Status.OPEN)

    def test_unknown_status_400(self):
        task = make_task(self.cust)
        res = self.post_status(task, "paused", self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_outsider_403(self):
        task = make_task(self.cust)
        res = self.post_status(task, "cancelled", self.outsider_tok)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_tasker_starts_work(self):
        task = make_task(self.cust, tasker=self.tasker, status=Task.Status.ASSIGNED)
        self.assertEqual(self.post_status(task, "in_progress", self.cust_tok).status_code, 403)
        res = self.post_status(task, "in_progress", self.tasker_tok)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "in_progress")
        self.assertEqual(res.data["allowed_status_changes"], ["completed"])

    def test_assigned_task_cannot_be_cancelled_409(self):
        task = make_task(self.cust, tasker=self.tasker, status=Task.Status.ASSIGNED)
        res = self.post_status(task, "cancelled", self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_tasker_completes_and_both_parties_are_emailed(self):
        task = make_task(self.cust, tasker=self.tasker, status=Task.Status.IN_PROGRESS)
        res = self.post_status(task, "completed", self.tasker_tok)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "completed")
        self.assertEqual(res.data["allowed_status_changes"], [])

        self.assertEqual(len(mail.outbox), 2)
        self.assertEqual({m.to[0] for m in mail.outbox}, {self.cust.email, self.tasker.email})
        self.assertEqual(mail.outbox[0].subject, 'Task "Paint bedroom" completed!')
        self.assertEqual(TaskerProfile.objects.get(profile__user=self.tasker).total_tasks, 1)

    def test_customer_may_also_complete(self):
        task = make_task(self.cust, tasker=self.tasker, status=Task.Status.IN_PROGRESS)
        self.assertEqual(self.post_status(task, "completed", self.cust_tok).status_code, 200)

    def test_terminal_states_are_final_409(self):
        task = make_task(self.cust, tasker=self.tasker, status=Task.Status.COMPLETED)
        for target in ("open", "cancelled", "in_progress"):
            self.assertEqual(self.post_status(task, target, self.cust_tok).status_code, 409)

    def test_missing_task_404(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.cust_tok.key}")
        res = self.client.post(reverse("task-status", args=[99999]), {"status": "open"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)


class TaskEditTests(APITestCase):
    def setUp(self):
        self.cust, self.cust_tok = make_user("cust", Profile.Role.CUSTOMER)
        self.tasker, self.tasker_tok = make_user("tasker", Profile.Role.TASKER)

    def patch(self, task, data, tok):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {tok.key}")
        return self.client.patch(reverse("task-detail", args=[task.id]), data, format="json")

    def test_customer_edits_open_task(self):
        task = make_task(self.cust)
        res = self.patch(task, {"price": "130.00", "title": "Paint two bedrooms"}, self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["price"], "130.00")
        self.assertEqual(res.data["title"], "Paint two bedrooms")

    def test_status_cannot_be_patched_400(self):
        task = make_task(self.cust)
        res = self.patch(task, {"status": "draft"}, self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assigned_task_is_no_longer_editable_409(self):
        task = make_task(self.cust, tasker=self.tasker, status=Task.Status.ASSIGNED)
        res = self.patch(task, {"price": "1.00"}, self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_acceptance_during_edit_wins_409(self):
        task = make_task(self.cust)
        application = Application.objects.create(
            task=task, tasker=self.tasker, customer=self.cust, proposed_rate=Decimal("110.00")
        )
        real_validate = TaskWriteSerializer.validate

        def accept_then_validate(serializer, attrs):
            accept_application(application.id, self.cust)
            return real_validate(serializer, attrs)

        with mock.patch.object(TaskWriteSerializer, "validate", autospec=True, side_effect=accept_then_validate):
            res = self.patch(task, {"title": "Paint the hallway"}, self.cust_tok)

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        task.refresh_from_db()
        application.refresh_from_db()
        self.assertEqual(task.status, Task.Status.ASSIGNED)
        self.assertEqual(task.tasker_id, self.tasker.id)
        self.assertEqual(task.title, "Paint bedroom")
        self.assertEqual(application.status, Application.Status.ACCEPTED)

    def test_edit_writes_only_the_edited_fields(self):
        task = make_task(self.cust)
        real_validate = TaskWriteSerializer.validate

        def concurrent_change_then_validate(serializer, attrs):
            Task.objects.filter(pk=task.pk).update(description="Two walls and the ceiling")
            return real_validate(serializer, attrs)

        with mock.patch.object(
            TaskWriteSerializer, "validate", autospec=True, side_effect=concurrent_change_then_validate
        ):
            res = self.patch(task, {"title": "Paint guest room"}, self.cust_tok)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        task.refresh_from_db()
        self.assertEqual(task.title, "Paint guest room")
        self.assertEqual(task.description, "Two walls and the ceiling")
        self.assertEqual(task.status, Task.Status.OPEN)

    def test_only_owner_edits_403(self):
        task = make_task(self.cust)
        res = self.patch(task, {"price": "1.00"}, self.tasker_tok)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_not_allowed_405(self):
        task = make_task(self.cust)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.cust_tok.key}")
        res = self.client.delete(reverse("task-detail", args=[task.id]))
        self.assertEqual(res.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_retrieve_includes_participants(self):
        task = make_task(self.cust, tasker=self.tasker, status=Task.Status.ASSIGNED)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.tasker_tok.key}")
        res = self.client.get(reverse("task-detail", args=[task.id]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["customer"]["id"], self.cust.id)
        self.assertEqual(res.data["tasker"]["id"], self.tasker.id)
        self.assertEqual(res.data["allowed_status_changes"], ["in_progress"])


class TaskInvariantTests(TestCase):
    def setUp(self):
        self.cust, _ = make_user("cust", Profile.Role.CUSTOMER)
        self.tasker, _ = make_user("tasker", Profile.Role.TASKER)

    def test_assigned_states_require_tasker(self):
        for st in (Task.Status.ASSIGNED, Task.Status.IN_PROGRESS, Task.Status.COMPLETED):
            with self.assertRaises(IntegrityError), transaction.atomic():
                make_task(self.cust, status=st)

    def test_unassigned_states_forbid_tasker(self):
        for st in (Task.Status.DRAFT, Task.Status.OPEN, Task.Status.CANCELLED):
            with self.assertRaises(IntegrityError), transaction.atomic():
                make_task(self.cust, tasker=self.tasker, status=st)

    def test_stale_status_change_conflicts(self):
        task = make_task(self.cust)
        stale = Task.objects.get(pk=task.pk)
        change_status(task, self.cust, Task.Status.CANCELLED)

        with self.assertRaises(TransitionConflict):
            change_status(stale, self.cust, Task.Status.CANCELLED)
