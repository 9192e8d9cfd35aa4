"""
Coupon repository implementation
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from sqlalchemy import case, func, insert, or_, select, update
from sqlalchemy.engine import RowMapping

from libs.common import ensure_utc
from libs.schemas import Coupon, CouponStatus, CouponUsage, DiscountType
from services.coupon.app.db.repositories.base import SQLRepositoryBase, to_db_datetime
from services.coupon.app.db.repositories.purchases import load_product, load_purchase_order
from services.coupon.app.db.tables import coupon_usages, coupons, purchase_orders


LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Makes % and _ in user input match literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


@dataclass
class NewCoupon:
    code: str
    discount_type: DiscountType
    discount_value: float
    expires_at: datetime
    created_at: datetime
    usage_limit: int = 1
    minimum_order_value: float | None = None
    max_discount_amount: float | None = None
    product_id: int | None = None
    purchase_order_id: int | None = None


def _to_usage(row: RowMapping) -> CouponUsage:
    return CouponUsage(
        usageId=row["usage_id"],
        couponId=row["coupon_id"],
        userId=row["user_id"],
        orderValue=row["order_value"],
        discount=row["discount"],
        usedAt=ensure_utc(row["used_at"]),
    )


def _load_coupon(session, row: RowMapping | None, with_details: bool = False) -> Coupon | None:
    if row is None:
        return None

    coupon = Coupon(
        couponId=row["coupon_id"],
        code=row["code"],
        discountType=DiscountType(row["discount_type"]),
        discountValue=row["discount_value"],
        minimumOrderValue=row["minimum_order_value"],
        maxDiscountAmount=row["max_discount_amount"],
        expiresAt=ensure_utc(row["expires_at"]),
        usageLimit=row["usage_limit"],
        usedCount=row["used_count"],
        status=CouponStatus(row["status"]),
        isActive=bool(row["is_active"]),
        productId=row["product_id"],
        purchaseOrderId=row["purchase_order_id"],
        createdAt=ensure_utc(row["created_at"]),
    )
    if row["product_id"] is not None:
        coupon.product = load_product(session, row["product_id"])
    if row["purchase_order_id"] is not None:
        coupon.purchaseOrder = load_purchase_order(session, row["purchase_order_id"])

    if with_details:
        usage_rows = (
            session.execute(
                select(coupon_usages)
                .where(coupon_usages.c.coupon_id == row["coupon_id"])
                .order_by(coupon_usages.c.used_at)
            )
            .mappings()
            .all()
        )
        coupon.usages = [_to_usage(usage) for usage in usage_rows]
    return coupon


class SQLAlchemyCouponRepository(SQLRepositoryBase):
    """Coupon repository backed by SQLAlchemy Core"""

    async def code_exists(self, code: str) -> bool:
        def _query():
            with self._session_factory() as session:
                found = session.execute(
                    select(coupons.c.coupon_id).where(coupons.c.code == code).limit(1)
                ).first()
                return found is not None

        return await self._run_in_thread(_query)

    async def find_coupon_by_code(self, code: str, with_details: bool = False) -> Coupon | None:
        def _query():
            with self._session_factory() as session:
                row = (
                    session.execute(select(coupons).where(coupons.c.code == code).limit(1))
                    .mappings()
                    .first()
                )
                return _load_coupon(session, row, with_details)

        return await self._run_in_thread(_query)

    async def find_coupon_by_id(self, coupon_id: int) -> Coupon | None:
        def _query():
            with self._session_factory() as session:
                row = (
                    session.execute(select(coupons).where(coupons.c.coupon_id == coupon_id))
                    .mappings()
                    .first()
                )
                return _load_coupon(session, row)

        return await self._run_in_thread(_query)

    async def find_active_coupon_for_order(self, purchase_order_id: int) -> Coupon | None:
        """Oldest ACTIVE coupon linked to the purchase order, if any."""
        def _query():
            with self._session_factory() as session:
                row = (
                    session.execute(
                        select(coupons)
                        .where(
                            coupons.c.purchase_order_id == purchase_order_id,
                            coupons.c.status == CouponStatus.ACTIVE.value,
                        )
                        .order_by(coupons.c.created_at, coupons.c.coupon_id)
                        .limit(1)
                    )
                    .mappings()
                    .first()
                )
                return _load_coupon(session, row)

        return await self._run_in_thread(_query)

    async def create_coupon(self, new_coupon: NewCoupon) -> Coupon:
        def _insert():
            with self._session_factory() as session:
                result = session.execute(
                    insert(coupons).values(
                        code=new_coupon.code,
                        discount_type=new_coupon.discount_type.value,
                        discount_value=new_coupon.discount_value,
                        minimum_order_value=new_coupon.minimum_order_value,
                        max_discount_amount=new_coupon.max_discount_amount,
                        expires_at=to_db_datetime(new_coupon.expires_at),
                        usage_limit=new_coupon.usage_limit,
                        used_count=0,
                        status=CouponStatus.ACTIVE.value,
                        is_active=True,
                        product_id=new_coupon.product_id,
                        purchase_order_id=new_coupon.purchase_order_id,
                        created_at=to_db_datetime(new_coupon.created_at),
                    )
                )
                coupon_id = result.inserted_primary_key[0]
                session.commit()

                row = (
                    session.execute(select(coupons).where(coupons.c.coupon_id == coupon_id))
                    .mappings()
                    .first()
                )
                return _load_coupon(session, row)

        return await self._run_in_thread(_insert)

    async def update_coupon_status(self, coupon_id: int, status: CouponStatus) -> Coupon | None:
        def _update():
            with self._session_factory() as session:
                result = session.execute(
                    update(coupons)
                    .where(coupons.c.coupon_id == coupon_id)
                    .values(status=status.value)
                )
                if result.rowcount == 0:
                    session.rollback()
                    return None
                session.commit()

                row = (
                    session.execute(select(coupons).where(coupons.c.coupon_id == coupon_id))
                    .mappings()
                    .first()
                )
                return _load_coupon(session, row)

        return await self._run_in_thread(_update)

    async def record_usage(
        self,
        coupon_id: int,
        user_id: str,
        order_value: float,
        discount: float,
        used_at: datetime,
    ) -> Coupon | None:
        """
        Consumes one use of the coupon and writes the usage record in a single
        transaction. The increment only happens while the coupon is ACTIVE and
        below its usage limit, so concurrent applies cannot over-redeem.

        Returns:
            the updated coupon, or None when no use was left
        """
        def _record():
            with self._session_factory() as session:
                # status is assigned before used_count: MySQL evaluates SET
                # assignments left to right against already updated columns
                result = session.execute(
                    update(coupons)
                    .where(
                        coupons.c.coupon_id == coupon_id,
                        coupons.c.status == CouponStatus.ACTIVE.value,
                        coupons.c.used_count < coupons.c.usage_limit,
                    )
                    .ordered_values(
                        (
                            coupons.c.status,
                            case(
                                (
                                    coupons.c.used_count + 1 >= coupons.c.usage_limit,
                                    CouponStatus.USED.value,
                                ),
                                else_=coupons.c.status,
                            ),
                        ),
                        (coupons.c.used_count, coupons.c.used_count + 1),
                    )
                )
                if result.rowcount != 1:
                    session.rollback()
                    return None

                session.execute(
                    insert(coupon_usages).values(
                        coupon_id=coupon_id,
                        user_id=user_id,
                        order_value=order_value,
                        discount=discount,
                        used_at=to_db_datetime(used_at),
                    )
                )
                session.commit()

                row = (
                    session.execute(select(coupons).where(coupons.c.coupon_id == coupon_id))
                    .mappings()
                    .first()
                )
                return _load_coupon(session, row)

        return await self._run_in_thread(_record)

    async def count_coupons(self, status: CouponStatus | None = None) -> int:
        def _query():
            with self._session_factory() as session:
                query = select(func.count()).select_from(coupons)
                if status is not None:
                    query = query.where(coupons.c.status == status.value)
                return session.execute(query).scalar_one()

        return await self._run_in_thread(_query)

    async def count_lapsed_coupons(self, now: datetime) -> int:
        """ACTIVE coupons whose expiry has passed (expiry is never written back)."""
        def _query():
            with self._session_factory() as session:
                return session.execute(
                    select(func.count())
                    .select_from(coupons)
                    .where(
                        coupons.c.status == CouponStatus.ACTIVE.value,
                        coupons.c.expires_at < to_db_datetime(now),
                    )
                ).scalar_one()

        return await self._run_in_thread(_query)

    async def count_usages(self) -> int:
        def _query():
            with self._session_factory() as session:
                return session.execute(select(func.count()).select_from(coupon_usages)).scalar_one()

        return await self._run_in_thread(_query)

    async def list_coupons(
        self,
        page: int,
        size: int,
        status: CouponStatus | None = None,
        search: str | None = None,
    ) -> Tuple[list[Coupon], int]:
        """
        Lists coupons newest first (paginated).

        Args:
            page: page number (starts at 1)
            size: page size
            status: optional status filter
            search: matches coupon code, customer name or email (case-insensitive)

        Returns:
            (coupons, total count) tuple
        """
        def _query():
            offset = (page - 1) * size
            joined = coupons.outerjoin(
                purchase_orders,
                coupons.c.purchase_order_id == purchase_orders.c.purchase_order_id,
            )

            conditions = []
            if status is not None:
                conditions.append(coupons.c.status == status.value)
            if search:
                pattern = f"%{escape_like(search)}%"
                conditions.append(
                    or_(
                        coupons.c.code.ilike(pattern, escape=LIKE_ESCAPE),
                        purchase_orders.c.customer_name.ilike(pattern, escape=LIKE_ESCAPE),
                        purchase_orders.c.email.ilike(pattern, escape=LIKE_ESCAPE),
                    )
                )

            with self._session_factory() as session:
                total = session.execute(
                    select(func.count()).select_from(joined).where(*conditions)
                ).scalar_one()

                rows = (
                    session.execute(
                        select(coupons)
                        .select_from(joined)
                        .where(*conditions)
                        .order_by(coupons.c.created_at.desc(), coupons.c.coupon_id.desc())
                        .limit(size)
                        .offset(offset)
                    )
                    .mappings()
                    .all()
                )
                return ([_load_coupon(session, row, with_details=True) for row in rows], total)

        return await self._run_in_thread(_query)

    async def recent_coupons(self, limit: int = 5) -> list[Coupon]:
        def _query():
            with self._session_factory() as session:
                rows = (
                    session.execute(
                        select(coupons)
                        .order_by(coupons.c.created_at.desc(), coupons.c.coupon_id.desc())
                        .limit(limit)
                    )
                    .mappings()
                    .all()
                )
                return [_load_coupon(session, row) for row in rows]

        return await self._run_in_thread(_query)
