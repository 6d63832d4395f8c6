from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from profiles.models import Profile, TaskerProfile
from reviews.models import Review
from tasks.models import Task

User = get_user_model()


def make_user(username, role):
    u = User.objects.create_user(username, f"{username}@ex.com", "pass1234")
    Profile.objects.create(user=u, role=role)
    return u, Token.objects.create(user=u)


class ReviewDeleteTests(APITestCase):
    def setUp(self):
        self.owner, self.owner_tok = make_user("cust1", Profile.Role.CUSTOMER)
        self.tasker, self.tasker_tok = make_user("tasker1", Profile.Role.TASKER)
        TaskerProfile.objects.create(profile=self.tasker.profile, rating=Decimal("4.00"), total_reviews=1)
        task = Task.objects.create(
            customer=self.owner,
            tasker=self.tasker,
            title="Paint fence",
            price=Decimal("80.00"),
            status=Task.Status.COMPLETED,
        )
        self.review = Review.objects.create(task=task, reviewer=self.owner, reviewed=self.tasker, rating=4)
        self.url = reverse("review-detail", args=[self.review.id])

    def auth(self, tok):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {tok.key}")

    def test_owner_can_delete_204_and_rating_resets(self):
        self.auth(self.owner_tok)
        res = self.client.delete(self.url)
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Review.objects.filter(id=self.review.id).exists())
        tp = TaskerProfile.objects.get(profile__user=self.tasker)
        self.assertEqual(tp.total_reviews, 0)
        self.assertEqual(tp.rating, Decimal("0.00"))

    def test_requires_auth_401(self):
        res = self.client.delete(self.url)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_reviewed_user_cannot_delete_403(self):
        self.auth(self.tasker_tok)
        res = self.client.delete(self.url)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Review.objects.filter(id=self.review.id).exists())

    def test_not_found_404(self):
        self.auth(self.owner_tok)
        res = self.client.delete(reverse("review-detail", args=[999999]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
