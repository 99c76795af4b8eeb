"""
Unit tests for Rating and User models.
"""

import uuid

from notegate.core.models.rating import Rating
from notegate.core.models.user import User


def test_rating_authorship():
    author = uuid.uuid4()
    rating = Rating(note_id=uuid.uuid4(), user_id=author, value=3)

    assert rating.is_authored_by(author) is True
    assert rating.is_authored_by(uuid.uuid4()) is False
    assert rating.is_authored_by(None) is False


def test_rating_repr():
    rating = Rating(note_id=uuid.uuid4(), user_id=uuid.uuid4(), value=4)
    assert "value=4" in repr(rating)


def test_user_display_name_falls_back_to_username():
    assert User(username="jane", full_name="Jane Doe").display_name == "Jane Doe"
    assert User(username="jane").display_name == "jane"


async def test_user_defaults(make_user):
    user = await make_user("plain")

    assert user.is_active is True
    assert user.is_admin is False
