import pytest


def _member(
    member_id,
    first_name=None,
    generation=1,
    gender="Male",
    last_name="Smith",
    date_of_birth=None,
    father=None,
    mother=None,
    spouse=None,
    photo=None,
):
    """Raw member record shaped like the members API response."""
    record = {
        "_id": member_id,
        "firstName": first_name or member_id.title(),
        "lastName": last_name,
        "gender": gender,
        "generation": generation,
    }
    if date_of_birth is not None:
        record["dateOfBirth"] = date_of_birth
    if father is not None:
        record["father"] = father
    if mother is not None:
        record["mother"] = mother
    if spouse is not None:
        record["spouse"] = spouse
    if photo is not None:
        record["photo"] = photo
    return record


@pytest.fixture
def member():
    return _member


@pytest.fixture
def no_photos():
    """Photo resolver that passes references through unchanged."""
    return lambda ref: ref
