from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.db import DatabaseError
from django.db.models.query import QuerySet
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from applications.models import Application
from applications.services import accept_application
from profiles.models import Profile
from tasks.models import Task

User = get_user_model()


def make_user(username, role):
    u = User.objects.create_user(username, f"{username}@example.com", "pass1234")
    Profile.objects.create(user=u, role=role)
    return u, Token.objects.create(user=u)


def apply(task, tasker, rate):
    return Application.objects.create(
        task=task, tasker=tasker, customer=task.customer, proposed_rate=Decimal(rate)
    )


class AcceptApplicationTests(APITestCase):
    def setUp(self):
        self.cust, self.cust_tok = make_user("cust", Profile.Role.CUSTOMER)
        self.cheap, self.cheap_tok = make_user("cheap", Profile.Role.TASKER)
        self.pricey, self.pricey_tok = make_user("pricey", Profile.Role.TASKER)
        self.task = Task.objects.create(
            customer=self.cust, title="Hang shelves", description="Three shelves",
            location_address="7 Cedar Ct", price=Decimal("100.00"),
        )
        self.app90 = apply(self.task, self.cheap, "90.00")
        self.app110 = apply(self.task, self.pricey, "110.00")

    def post(self, action, application, tok):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {tok.key}")
        return self.client.post(reverse(f"application-{action}", args=[application.id]))

    def test_accepting_assigns_tasker_and_rejects_the_rest(self):
        res = self.post("accept", self.app90, self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "accepted")

        self.task.refresh_from_db()
        self.app110.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.ASSIGNED)
        self.assertEqual(self.task.tasker_id, self.cheap.id)
        self.assertEqual(self.app110.status, Application.Status.REJECTED)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.cheap.email])
        self.assertEqual(mail.outbox[0].subject, "Your application was accepted!")

    def test_second_acceptance_conflicts_409(self):
        self.assertEqual(self.post("accept", self.app90, self.cust_tok).status_code, 200)
        res = self.post("accept", self.app110, self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

        self.task.refresh_from_db()
        self.assertEqual(self.task.tasker_id, self.cheap.id)
        self.assertEqual(Application.objects.filter(task=self.task, status="accepted").count(), 1)

    def test_accept_on_task_that_is_no_longer_open_rolls_back_409(self):
        Task.objects.filter(pk=self.task.pk).update(status=Task.Status.CANCELLED)
        res = self.post("accept", self.app90, self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

        self.app90.refresh_from_db()
        self.app110.refresh_from_db()
        self.assertEqual(self.app90.status, Application.Status.PENDING)
        self.assertEqual(self.app110.status, Application.Status.PENDING)
        self.assertEqual(len(mail.outbox), 0)

    def test_failure_while_rejecting_siblings_undoes_the_assignment(self):
        real_update = QuerySet.update

        def failing_update(qs, **kwargs):
            if kwargs.get("status") == Application.Status.REJECTED:
                raise DatabaseError("connection lost")
            return real_update(qs, **kwargs)

        with mock.patch.object(QuerySet, "update", autospec=True, side_effect=failing_update):
            with self.assertRaises(DatabaseError):
                accept_application(self.app90.id, self.cust)

        self.task.refresh_from_db()
        self.app90.refresh_from_db()
        self.app110.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.OPEN)
        self.assertIsNone(self.task.tasker_id)
        self.assertEqual(self.app90.status, Application.Status.PENDING)
        self.assertEqual(self.app110.status, Application.Status.PENDING)

    def test_only_task_customer_accepts_403(self):
        res = self.post("accept", self.app90, self.cheap_tok)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.OPEN)

    def test_withdrawn_application_cannot_be_accepted_409(self):
        Application.objects.filter(pk=self.app90.pk).update(status=Application.Status.WITHDRAWN)
        res = self.post("accept", self.app90, self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_unknown_application_404(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.cust_tok.key}")
        res = self.client.post(reverse("application-accept", args=[99999]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)


class RejectWithdrawTests(APITestCase):
    def setUp(self):
        self.cust, self.cust_tok = make_user("cust", Profile.Role.CUSTOMER)
        self.tasker, self.tasker_tok = make_user("tasker", Profile.Role.TASKER)
        self.other, self.other_tok = make_user("other", Profile.Role.TASKER)
        self.task = Task.objects.create(
            customer=self.cust, title="Rake leaves", location_address="1 Maple Dr", price=Decimal("45.00"),
        )
        self.app = apply(self.task, self.tasker, "45.00")

    def post(self, action, tok):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {tok.key}")
        return self.client.post(reverse(f"application-{action}", args=[self.app.id]))

    def test_customer_rejects(self):
        res = self.post("reject", self.cust_tok)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "rejected")
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.OPEN)

    def test_only_customer_rejects_403(self):
        self.assertEqual(self.post("reject", self.tasker_tok).status_code, 403)

    def test_applicant_withdraws_then_cannot_withdraw_again(self):
        res = self.post("withdraw", self.tasker_tok)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "withdrawn")
        self.assertEqual(self.post("withdraw", self.tasker_tok).status_code, 409)

    def test_only_applicant_withdraws_403(self):
        self.assertEqual(self.post("withdraw", self.other_tok).status_code, 403)
        self.assertEqual(self.post("withdraw", self.cust_tok).status_code, 403)

    def test_rejected_application_cannot_be_withdrawn_409(self):
        self.post("reject", self.cust_tok)
        self.assertEqual(self.post("withdraw", self.tasker_tok).status_code, 409)
