# humidor/repos/order_repo.py
from typing import List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from humidor.data.models.order import OrderModel, OrderItemModel, PaymentModel
from humidor.data.models.user import UserModel

SORTABLE_COLUMNS = {
    "created_at": OrderModel.created_at,
    "total": OrderModel.total,
    "status": OrderModel.status,
}


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        """Stage an order in the current transaction; the caller commits."""
        self.db.add(order)
        self.db.flush()
        return order

    def add_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        return item

    def add_payment(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        return payment

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.deleted_at.is_(None))
            .options(selectinload(OrderModel.items), selectinload(OrderModel.payment))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_for_user(self, user_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id, OrderModel.deleted_at.is_(None))
                .options(selectinload(OrderModel.items), selectinload(OrderModel.payment))
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def list_page(
        self,
        page: int,
        limit: int,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        status: str | None = None,
    ) -> Tuple[List[Tuple[OrderModel, UserModel]], int]:
        conditions = [OrderModel.deleted_at.is_(None)]
        if status:
            conditions.append(OrderModel.status == status)

        column = SORTABLE_COLUMNS[sort_by]
        ordering = column.desc() if sort_order == "desc" else column.asc()

        rows = self.db.execute(
            select(OrderModel, UserModel)
            .join(UserModel, UserModel.id == OrderModel.user_id)
            .where(*conditions)
            .order_by(ordering, OrderModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()
        return [(row[0], row[1]) for row in rows], total

    def update_status(self, order_id: int, old_status: str, new_status: str) -> int:
        # UPDATE orders SET status = :new WHERE id = :id AND status = :old
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == old_status)
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def update_payment_status(self, order_id: int, status: str) -> int:
        result = self.db.execute(
            update(PaymentModel)
            .where(PaymentModel.order_id == order_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def soft_delete(self, order: OrderModel, when) -> OrderModel:
        order.deleted_at = when
        self.db.commit()
        self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
