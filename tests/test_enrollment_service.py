import asyncio
import uuid
from decimal import Decimal

import pytest

from marketplace.core.exceptions import (
    AlreadyEnrolledError, InvalidTransitionError, MarketplaceException, NotFoundError,
    StaleEnrollmentError, SubjectFullError, ValidationError
)
from marketplace.models import ClassGroup, CourseEnrollment
from marketplace.models.enrollment import SubjectKind, PaymentStatus
from marketplace.services.catalog_service import CatalogService
from marketplace.services import enrollment_lifecycle
from marketplace.services.enrollment_lifecycle import has_access
from marketplace.services.enrollment_service import EnrollmentService
from marketplace.services.profile_service import ProfileService
from marketplace.utils.payment_reference import reference_pattern


async def test_enrollment_starts_pending_with_price_snapshot(db, class_group, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.CLASS, db)

    enrollment = await service.create_enrollment(class_group.id, member_id, profile_fields)

    assert enrollment.payment_status == "pending"
    assert reference_pattern().match(enrollment.payment_reference)
    assert float(enrollment.payment_amount) == 100000.0
    assert enrollment.payment_method == "multicaixa_express"
    assert enrollment.paid_at is None
    assert enrollment.version == 1
    assert enrollment.class_group_id == class_group.id
    assert has_access(SubjectKind.CLASS, enrollment) is False


async def test_enrollment_saves_profile(db, class_group, member_id, profile_fields):
    await EnrollmentService(SubjectKind.CLASS, db).create_enrollment(class_group.id, member_id, profile_fields)

    profile = await ProfileService(db).get_by_user(member_id)
    assert profile.full_name == "Ana Maria Domingos"
    assert profile.province == "Luanda"


async def test_confirm_grants_access(db, class_group, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.CLASS, db)
    enrollment = await service.create_enrollment(class_group.id, member_id, profile_fields)

    confirmed = await service.confirm_payment(enrollment.id, acted_by=uuid.uuid4())

    assert confirmed.payment_status == "paid"
    assert confirmed.paid_at is not None
    assert confirmed.version == 2
    assert has_access(SubjectKind.CLASS, await service.get_for_user(member_id, class_group.id))


async def test_mentorship_confirmation_uses_its_own_spelling(db, mentorship, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.MENTORSHIP, db)
    enrollment = await service.create_enrollment(mentorship.id, member_id, profile_fields)

    confirmed = await service.confirm_payment(enrollment.id)

    assert confirmed.payment_status == "confirmed"
    assert has_access(SubjectKind.MENTORSHIP, confirmed)
    assert await service.count(status=PaymentStatus.CONFIRMED) == 1


async def test_duplicate_enrollment_is_rejected(db, course, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.COURSE, db)
    first = await service.create_enrollment(course.id, member_id, profile_fields)
    first_id, first_reference = first.id, first.payment_reference

    with pytest.raises(AlreadyEnrolledError) as exc_info:
        await service.create_enrollment(course.id, member_id, {**profile_fields, "city": "Benguela"})

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail["code"] == "already_enrolled"
    assert await service.count(subject_id=course.id) == 1

    unchanged = await service.get(first_id, fresh=True)
    assert unchanged.payment_reference == first_reference
    assert unchanged.payment_status == "pending"

    # The profile write happened before the conflicting insert and is kept
    profile = await ProfileService(db).get_by_user(member_id)
    assert profile.city == "Benguela"


async def test_price_change_does_not_touch_existing_enrollments(db, class_group, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.CLASS, db)
    enrollment = await service.create_enrollment(class_group.id, member_id, profile_fields)
    enrollment_id = enrollment.id

    await CatalogService(db).update_subject(SubjectKind.CLASS, class_group.id, {"price_aoa": Decimal("150000.00")})

    reloaded = await service.get(enrollment_id, fresh=True)
    assert float(reloaded.payment_amount) == 100000.0

    newcomer = await service.create_enrollment(class_group.id, uuid.uuid4(), profile_fields)
    assert float(newcomer.payment_amount) == 150000.0


async def test_confirmed_enrollment_cannot_be_cancelled(db, course, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.COURSE, db)
    enrollment = await service.create_enrollment(course.id, member_id, profile_fields)
    enrollment_id = enrollment.id
    await service.confirm_payment(enrollment_id)

    with pytest.raises(InvalidTransitionError):
        await service.cancel_enrollment(enrollment_id)

    current = await service.get(enrollment_id, fresh=True)
    assert current.payment_status == "paid"
    assert current.version == 2


async def test_cancelled_enrollment_cannot_be_confirmed(db, course, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.COURSE, db)
    enrollment = await service.create_enrollment(course.id, member_id, profile_fields)
    enrollment_id = enrollment.id
    cancelled = await service.cancel_enrollment(enrollment_id)
    assert cancelled.payment_status == "cancelled"
    assert cancelled.paid_at is None

    with pytest.raises(InvalidTransitionError):
        await service.confirm_payment(enrollment_id)

    current = await service.get(enrollment_id, fresh=True)
    assert current.payment_status == "cancelled"
    assert has_access(SubjectKind.COURSE, current) is False


async def test_second_confirmation_is_rejected(db, course, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.COURSE, db)
    enrollment = await service.create_enrollment(course.id, member_id, profile_fields)
    enrollment_id = enrollment.id
    first = await service.confirm_payment(enrollment_id)
    paid_at = first.paid_at

    with pytest.raises(InvalidTransitionError):
        await service.confirm_payment(enrollment_id)

    current = await service.get(enrollment_id, fresh=True)
    assert current.paid_at == paid_at
    assert current.version == 2


async def test_stale_version_is_rejected(db, course, member_id, profile_fields):
    service = EnrollmentService(SubjectKind.COURSE, db)
    enrollment = await service.create_enrollment(course.id, member_id, profile_fields)
    enrollment_id = enrollment.id

    with pytest.raises(StaleEnrollmentError):
        await service.confirm_payment(enrollment_id, expected_version=3)

    current = await service.get(enrollment_id, fresh=True)
    assert current.payment_status == "pending"

    confirmed = await service.confirm_payment(enrollment_id, expected_version=1)
    assert confirmed.version == 2


async def test_transition_of_unknown_enrollment(db):
    service = EnrollmentService(SubjectKind.CLASS, db)
    with pytest.raises(NotFoundError):
        await service.confirm_payment(uuid.uuid4())


async def test_concurrent_confirmations_have_one_winner(session_factory, db, course, member_id, profile_fields):
    enrollment = await EnrollmentService(SubjectKind.COURSE, db).create_enrollment(course.id, member_id, profile_fields)
    enrollment_id = enrollment.id

    async def confirm():
        async with session_factory() as session:
            return await EnrollmentService(SubjectKind.COURSE, session).confirm_payment(enrollment_id)

    results = await asyncio.gather(confirm(), confirm(), return_exceptions=True)

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert isinstance(losers[0], MarketplaceException)

    current = await EnrollmentService(SubjectKind.COURSE, db).get(enrollment_id, fresh=True)
    assert current.payment_status == "paid"
    assert current.version == 2


async def test_full_class_rejects_new_enrollments(db, seed, profile_fields):
    group = await seed(ClassGroup(
        title="Oratória", schedule="Quartas 18:00", format="online",
        price_aoa=Decimal("30000.00"), spots=1, topics=[]
    ))
    service = EnrollmentService(SubjectKind.CLASS, db)

    first = await service.create_enrollment(group.id, uuid.uuid4(), profile_fields)
    # Pending enrollments do not hold a spot
    second = await service.create_enrollment(group.id, uuid.uuid4(), profile_fields)
    await service.confirm_payment(first.id)

    with pytest.raises(SubjectFullError):
        await service.create_enrollment(group.id, uuid.uuid4(), profile_fields)

    assert second.payment_status == "pending"
    assert await service.count(subject_id=group.id) == 2


async def test_inactive_subject_rejects_enrollment(db, seed, member_id, profile_fields):
    group = await seed(ClassGroup(
        title="Arquivada", schedule="-", format="online",
        price_aoa=Decimal("10000.00"), spots=10, topics=[], is_active=False
    ))
    with pytest.raises(ValidationError):
        await EnrollmentService(SubjectKind.CLASS, db).create_enrollment(group.id, member_id, profile_fields)


async def test_unknown_subject(db, member_id, profile_fields):
    with pytest.raises(NotFoundError):
        await EnrollmentService(SubjectKind.COURSE, db).create_enrollment(uuid.uuid4(), member_id, profile_fields)


async def test_admin_listing_filters_and_searches(db, course, profile_fields):
    service = EnrollmentService(SubjectKind.COURSE, db)
    pending = await service.create_enrollment(course.id, uuid.uuid4(), profile_fields)
    paid = await service.create_enrollment(course.id, uuid.uuid4(), profile_fields)
    pending_reference = pending.payment_reference
    await service.confirm_payment(paid.id)

    pending_page = await service.list_admin(status=PaymentStatus.PENDING)
    assert pending_page["total"] == 1
    row = pending_page["items"][0]
    assert row["member_name"] == "Ana Maria Domingos"
    assert row["subject_title"] == "Gestão Financeira Pessoal"

    assert (await service.list_admin(status=None))["total"] == 2
    assert (await service.list_admin(status=PaymentStatus.CONFIRMED))["total"] == 1

    found = await service.list_admin(status=None, search=pending_reference.lower())
    assert found["total"] == 1
    assert found["items"][0]["enrollment"].payment_reference == pending_reference

    assert (await service.list_admin(status=None, search="%"))["total"] == 0


async def test_transitions_follow_the_transition_table(db, course, member_id, profile_fields, monkeypatch):
    service = EnrollmentService(SubjectKind.COURSE, db)
    enrollment = await service.create_enrollment(course.id, member_id, profile_fields)
    enrollment_id = enrollment.id
    await service.cancel_enrollment(enrollment_id)

    monkeypatch.setitem(
        enrollment_lifecycle.ALLOWED_TRANSITIONS,
        PaymentStatus.CANCELLED, frozenset({PaymentStatus.CONFIRMED}),
    )
    reopened = await service.confirm_payment(enrollment_id)

    assert reopened.payment_status == "paid"
    assert reopened.version == 3


async def test_legacy_confirmed_spelling_counts_as_confirmed(db, seed, course, profile_fields):
    legacy = await seed(CourseEnrollment(
        user_id=uuid.uuid4(), course_id=course.id, payment_status="confirmed",
        payment_reference="JU10-LEGACY-000001", payment_amount=Decimal("45000.00"), version=1
    ))
    service = EnrollmentService(SubjectKind.COURSE, db)
    await service.create_enrollment(course.id, uuid.uuid4(), profile_fields)

    assert await service.count(subject_id=course.id, status=PaymentStatus.CONFIRMED) == 1
    assert await service.confirmed_revenue() == 45000.0
    page = await service.list_admin(status=PaymentStatus.CONFIRMED)
    assert [row["enrollment"].id for row in page["items"]] == [legacy.id]

    with pytest.raises(InvalidTransitionError):
        await service.cancel_enrollment(legacy.id)
