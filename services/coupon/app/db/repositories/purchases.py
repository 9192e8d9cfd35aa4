"""
Purchase order and product repository implementation
"""
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, insert, or_, select

from libs.common import ensure_utc
from libs.schemas import Product, PurchaseOrder
from services.coupon.app.db.repositories.base import SQLRepositoryBase, to_db_datetime
from services.coupon.app.db.tables import products, purchase_orders


@dataclass
class NewPurchaseOrder:
    order_number: str
    customer_name: str
    email: str
    total_amount: float
    product_id: int
    created_at: datetime
    phone: str | None = None
    serial_number: str | None = None


@dataclass
class NewProduct:
    name: str
    category: str
    price: float
    created_at: datetime
    description: str | None = None
    is_active: bool = True


def _to_product(row) -> Product | None:
    if row is None:
        return None
    return Product(
        productId=row["product_id"],
        name=row["name"],
        description=row["description"],
        category=row["category"],
        price=row["price"],
        isActive=bool(row["is_active"]),
    )


def _to_purchase_order(session, row) -> PurchaseOrder | None:
    if row is None:
        return None
    return PurchaseOrder(
        purchaseOrderId=row["purchase_order_id"],
        orderNumber=row["order_number"],
        customerName=row["customer_name"],
        email=row["email"],
        phone=row["phone"],
        totalAmount=row["total_amount"],
        serialNumber=row["serial_number"],
        productId=row["product_id"],
        product=load_product(session, row["product_id"]),
        createdAt=ensure_utc(row["created_at"]),
    )


def load_product(session, product_id: int) -> Product | None:
    row = (
        session.execute(select(products).where(products.c.product_id == product_id))
        .mappings()
        .first()
    )
    return _to_product(row)


def load_purchase_order(session, purchase_order_id: int) -> PurchaseOrder | None:
    row = (
        session.execute(
            select(purchase_orders).where(purchase_orders.c.purchase_order_id == purchase_order_id)
        )
        .mappings()
        .first()
    )
    return _to_purchase_order(session, row)


class SQLAlchemyPurchaseRepository(SQLRepositoryBase):
    """Purchase order / product repository backed by SQLAlchemy Core"""

    async def find_purchase_order_by_id(self, purchase_order_id: int) -> PurchaseOrder | None:
        def _query():
            with self._session_factory() as session:
                return load_purchase_order(session, purchase_order_id)

        return await self._run_in_thread(_query)

    async def find_purchase_order_by_number(self, order_number: str) -> PurchaseOrder | None:
        def _query():
            with self._session_factory() as session:
                row = (
                    session.execute(
                        select(purchase_orders)
                        .where(purchase_orders.c.order_number == order_number)
                        .limit(1)
                    )
                    .mappings()
                    .first()
                )
                return _to_purchase_order(session, row)

        return await self._run_in_thread(_query)

    async def find_purchase_order_for_invoice(
        self,
        email: str,
        invoice_number: str | None = None,
        serial_number: str | None = None,
    ) -> PurchaseOrder | None:
        """Order matching (order number OR serial number) AND email."""
        matchers = []
        if invoice_number:
            matchers.append(purchase_orders.c.order_number == invoice_number)
        if serial_number:
            matchers.append(purchase_orders.c.serial_number == serial_number)
        if not matchers:
            return None

        def _query():
            with self._session_factory() as session:
                row = (
                    session.execute(
                        select(purchase_orders)
                        .where(or_(*matchers), purchase_orders.c.email == email)
                        .order_by(purchase_orders.c.created_at.desc())
                        .limit(1)
                    )
                    .mappings()
                    .first()
                )
                return _to_purchase_order(session, row)

        return await self._run_in_thread(_query)

    async def create_purchase_order(self, new_order: NewPurchaseOrder) -> PurchaseOrder:
        def _insert():
            with self._session_factory() as session:
                result = session.execute(
                    insert(purchase_orders).values(
                        order_number=new_order.order_number,
                        customer_name=new_order.customer_name,
                        email=new_order.email,
                        phone=new_order.phone,
                        total_amount=new_order.total_amount,
                        product_id=new_order.product_id,
                        serial_number=new_order.serial_number,
                        created_at=to_db_datetime(new_order.created_at),
                    )
                )
                purchase_order_id = result.inserted_primary_key[0]
                session.commit()
                return load_purchase_order(session, purchase_order_id)

        return await self._run_in_thread(_insert)

    async def find_product_by_id(self, product_id: int) -> Product | None:
        def _query():
            with self._session_factory() as session:
                return load_product(session, product_id)

        return await self._run_in_thread(_query)

    async def find_first_product(self) -> Product | None:
        def _query():
            with self._session_factory() as session:
                row = (
                    session.execute(select(products).order_by(products.c.product_id).limit(1))
                    .mappings()
                    .first()
                )
                return _to_product(row)

        return await self._run_in_thread(_query)

    async def list_products(self, active_only: bool = True) -> list[Product]:
        def _query():
            with self._session_factory() as session:
                query = select(products).order_by(products.c.name)
                if active_only:
                    query = query.where(products.c.is_active.is_(True))
                rows = session.execute(query).mappings().all()
                return [_to_product(row) for row in rows]

        return await self._run_in_thread(_query)

    async def count_products(self) -> int:
        def _query():
            with self._session_factory() as session:
                return session.execute(select(func.count()).select_from(products)).scalar_one()

        return await self._run_in_thread(_query)

    async def create_product(self, new_product: NewProduct) -> Product:
        def _insert():
            with self._session_factory() as session:
                result = session.execute(
                    insert(products).values(
                        name=new_product.name,
                        description=new_product.description,
                        category=new_product.category,
                        price=new_product.price,
                        is_active=new_product.is_active,
                        created_at=to_db_datetime(new_product.created_at),
                    )
                )
                product_id = result.inserted_primary_key[0]
                session.commit()
                return load_product(session, product_id)

        return await self._run_in_thread(_insert)
