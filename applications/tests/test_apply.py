from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from applications.models import Application
from profiles.models import Profile
from tasks.models import Task

User = get_user_model()


def make_user(username, role):
    u = User.objects.create_user(username, f"{username}@example.com", "pass1234")
    Profile.objects.create(user=u, role=role, full_name=username.title())
    return u, Token.objects.create(user=u)


def make_task(customer, **fields):
    data = {
        "title": "Walk the dog",
        "description": "30 minutes daily",
        "location_address": "3 Birch Ln",
        "price": Decimal("100.00"),
    }
    data.update(fields)
    return Task.objects.create(customer=customer, **data)


class ApplyTests(APITestCase):
    def setUp(self):
        self.cust, self.cust_tok = make_user("cust", Profile.Role.CUSTOMER)
        self.tasker, self.tasker_tok = make_user("tasker", Profile.Role.TASKER)
        self.task = make_task(self.cust)
        self.url = reverse("task-applications", args=[self.task.id])

    def auth(self, tok):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {tok.key}")

    def test_tasker_applies_201_and_customer_is_emailed(self):
        self.auth(self.tasker_tok)
        res = self.client.post(self.url, {"message": " I love dogs ", "proposed_rate": "90.00"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], "pending")
        self.assertEqual(res.data["message"], "I love dogs")
        self.assertEqual(res.data["proposed_rate"], "90.00")
        self.assertEqual(res.data["tasker"]["id"], self.tasker.id)
        self.assertEqual(res.data["task"]["id"], self.task.id)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.cust.email])
        self.assertEqual(mail.outbox[0].subject, 'New application for "Walk the dog"')

    def test_proposed_rate_defaults_to_task_price(self):
        self.auth(self.tasker_tok)
        res = self.client.post(self.url, {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["proposed_rate"], "100.00")

    def test_customer_email_respects_preferences(self):
        profile = self.cust.profile
        profile.notification_preferences = {"email": True, "application_update": {"email": False}}
        profile.save()
        self.auth(self.tasker_tok)
        self.client.post(self.url, {}, format="json")
        self.assertEqual(len(mail.outbox), 0)

    def test_duplicate_application_400(self):
        self.auth(self.tasker_tok)
        self.assertEqual(self.client.post(self.url, {}, format="json").status_code, 201)
        res = self.client.post(self.url, {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Application.objects.filter(task=self.task).count(), 1)

    def test_customer_role_cannot_apply_403(self):
        other, other_tok = make_user("other", Profile.Role.CUSTOMER)
        self.auth(other_tok)
        res = self.client.post(self.url, {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_cannot_apply_to_own_task_400(self):
        both, both_tok = make_user("both", Profile.Role.BOTH)
        own = make_task(both)
        self.auth(both_tok)
        res = self.client.post(reverse("task-applications", args=[own.id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_apply_to_non_open_task_400(self):
        draft = make_task(self.cust, status=Task.Status.DRAFT)
        self.auth(self.tasker_tok)
        res = self.client.post(reverse("task-applications", args=[draft.id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_rate_400(self):
        self.auth(self.tasker_tok)
        res = self.client.post(self.url, {"proposed_rate": "-1"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_task_404(self):
        self.auth(self.tasker_tok)
        res = self.client.post(reverse("task-applications", args=[99999]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)


class ApplicationListTests(APITestCase):
    def setUp(self):
        self.cust, self.cust_tok = make_user("cust", Profile.Role.CUSTOMER)
        self.t1, self.t1_tok = make_user("t1", Profile.Role.TASKER)
        self.t2, self.t2_tok = make_user("t2", Profile.Role.TASKER)
        self.task = make_task(self.cust)
        self.a1 = Application.objects.create(task=self.task, tasker=self.t1, customer=self.cust, proposed_rate=Decimal("90"))
        self.a2 = Application.objects.create(task=self.task, tasker=self.t2, customer=self.cust, proposed_rate=Decimal("95"))
        self.url = reverse("task-applications", args=[self.task.id])

    def test_customer_sees_all_applications(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.cust_tok.key}")
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual({a["id"] for a in res.data}, {self.a1.id, self.a2.id})

    def test_tasker_sees_only_own_application(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.t1_tok.key}")
        res = self.client.get(self.url)
        self.assertEqual([a["id"] for a in res.data], [self.a1.id])

    def test_my_applications_with_status_filter(self):
        Application.objects.filter(pk=self.a1.pk).update(status=Application.Status.WITHDRAWN)
        other_task = make_task(self.cust, title="Water plants")
        a3 = Application.objects.create(task=other_task, tasker=self.t1, customer=self.cust)

        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.t1_tok.key}")
        res = self.client.get(reverse("my-applications"))
        self.assertEqual({a["id"] for a in res.data}, {self.a1.id, a3.id})
        res = self.client.get(reverse("my-applications"), {"status": "pending"})
        self.assertEqual([a["id"] for a in res.data], [a3.id])
        res = self.client.get(reverse("my-applications"), {"status": "bogus"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_application_detail_participants_only(self):
        url = reverse("application-detail", args=[self.a1.id])
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.cust_tok.key}")
        self.assertEqual(self.client.get(url).status_code, 200)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.t2_tok.key}")
        self.assertEqual(self.client.get(url).status_code, 403)
