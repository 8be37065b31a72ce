import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidState, NotFound
from app.models.promotion import Promotion, PromotionUsage
from app.schemas.promotion import PromotionCreate

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class PromotionService:
    def __init__(self, db: Session):
        self.db = db

    def add_promotion(self, data: PromotionCreate) -> Promotion:
        promo = Promotion(**data.model_dump(), used_count=0, is_active=True)
        self.db.add(promo)
        self.db.commit()
        self.db.refresh(promo)

        logger.info("Promotion %s added (%s)", promo.id, promo.title)
        return promo

    def list_promotions(self) -> List[Promotion]:
        return self.db.query(Promotion).order_by(Promotion.id).all()

    def apply_promotion(self, promotion_id: int, user_id: int) -> Promotion:
        """
        Record one use of a promotion by ``user_id``.

        The usage counter is bumped with a conditional update so concurrent
        applications never push it past ``usage_limit``; the unique
        (user, promotion) row stops a user applying it twice.
        """
        promo = self.db.get(Promotion, promotion_id)
        if not promo or not promo.is_active:
            raise NotFound("Promotion not found or inactive.")

        if promo.usage_limit and promo.used_count >= promo.usage_limit:
            raise InvalidState("Promotion usage limit reached.")

        if promo.valid_till and datetime.now(timezone.utc) > _as_utc(promo.valid_till):
            raise InvalidState("Promotion has expired.")

        already_used = self.db.query(PromotionUsage).filter(
            PromotionUsage.user_id == user_id,
            PromotionUsage.promotion_id == promotion_id,
        ).first()
        if already_used:
            raise InvalidState("You have already used this promotion.")

        stmt = update(Promotion).where(
            Promotion.id == promotion_id,
            Promotion.is_active == True,  # noqa: E712
        )
        if promo.usage_limit:
            stmt = stmt.where(Promotion.used_count < Promotion.usage_limit)
        stmt = stmt.values(used_count=Promotion.used_count + 1).execution_options(synchronize_session=False)

        try:
            result = self.db.execute(stmt)
            if result.rowcount != 1:
                self.db.rollback()
                raise InvalidState("Promotion usage limit reached.")
            self.db.add(PromotionUsage(user_id=user_id, promotion_id=promotion_id))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidState("You have already used this promotion.")

        self.db.refresh(promo)
        logger.info("Promotion %s applied by user %s", promotion_id, user_id)
        return promo
