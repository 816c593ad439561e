from types import SimpleNamespace

import pytest

from tienda_gamer.core.exceptions import InvalidTransitionError, ServiceOrderNotFoundError
from tienda_gamer.crud import service_order_crud
from tienda_gamer.schemas.service_order_schema import CommentAuthor, ServiceOrderStatus as S
from tienda_gamer.services.service_order_service import (
    OPENING_COMMENT,
    ServiceOrderService,
    can_transition,
    validate_transition,
)


# ========================================
# Tabla de transiciones
# ========================================

@pytest.mark.parametrize(
    "current,new",
    [
        (S.RECIBIDO, S.DIAGNOSTICO),
        (S.DIAGNOSTICO, S.ESPERANDO_APROBACION),
        (S.DIAGNOSTICO, S.REPARANDO),
        (S.ESPERANDO_APROBACION, S.REPARANDO),
        (S.ESPERANDO_APROBACION, S.DIAGNOSTICO),
        (S.REPARANDO, S.COMPLETADO),
        (S.COMPLETADO, S.ENTREGADO),
        (S.COMPLETADO, S.REPARANDO),
        (S.ENTREGADO, S.DIAGNOSTICO),
    ],
)
def test_allowed_transitions(current, new):
    assert can_transition(current, new)


@pytest.mark.parametrize(
    "current,new",
    [
        (S.RECIBIDO, S.ENTREGADO),
        (S.RECIBIDO, S.REPARANDO),
        (S.DIAGNOSTICO, S.COMPLETADO),
        (S.REPARANDO, S.ENTREGADO),
        (S.ENTREGADO, S.RECIBIDO),
    ],
)
def test_rejected_transitions(current, new):
    with pytest.raises(InvalidTransitionError):
        validate_transition(current, new)


def test_same_status_is_always_allowed():
    for status in S:
        assert can_transition(status, status)


def test_legacy_status_labels_are_normalised():
    assert S("Recibido") == S.RECIBIDO
    assert S("Diagnóstico") == S.DIAGNOSTICO
    assert S("Esperando aprobación") == S.ESPERANDO_APROBACION
    with pytest.raises(ValueError):
        S("perdido")


# ========================================
# Servicio con el CRUD sustituido
# ========================================

class FakeServiceOrderCrud:

    def __init__(self):
        self.orders = {}

    async def get_service_order(self, db, order_id):
        return self.orders.get(order_id)

    async def get_service_orders(self, db, client_id=None):
        return [o for o in self.orders.values() if client_id is None or o.client_id == client_id]

    async def create_service_order(self, db, client_id, description, opening_comment):
        order = SimpleNamespace(
            id=f"o{len(self.orders) + 1}",
            client_id=client_id,
            description=description,
            status=S.RECIBIDO.value,
            admin_description=None,
            admin_images=[],
            quotation=None,
            comments=[SimpleNamespace(text=opening_comment, author=CommentAuthor.ADMIN.value)],
        )
        self.orders[order.id] = order
        return order

    async def save_status(self, db, db_order, status, admin_description=None, admin_images=None):
        db_order.status = status.value
        if admin_description is not None:
            db_order.admin_description = admin_description
        if admin_images is not None:
            db_order.admin_images = list(admin_images)
        return db_order

    async def save_quotation(self, db, db_order, quotation):
        db_order.quotation = quotation
        return db_order

    async def append_comment(self, db, db_order, text, author):
        db_order.comments.append(SimpleNamespace(text=text, author=author.value))
        return db_order


@pytest.fixture
def fake_crud(monkeypatch):
    fake = FakeServiceOrderCrud()
    for name in (
        "get_service_order",
        "get_service_orders",
        "create_service_order",
        "save_status",
        "save_quotation",
        "append_comment",
    ):
        monkeypatch.setattr(service_order_crud, name, getattr(fake, name))
    return fake


@pytest.fixture
def service():
    return ServiceOrderService()


async def test_new_order_starts_received_with_opening_comment(service, fake_crud):
    order = await service.create(None, "cliente-1", "La consola no enciende")

    assert order.status == "recibido"
    assert order.comments[0].text == OPENING_COMMENT
    assert order.comments[0].author == "admin"


async def test_full_repair_flow(service, fake_crud):
    order = await service.create(None, "cliente-1", "Joystick con drift")

    for status in (S.DIAGNOSTICO, S.ESPERANDO_APROBACION, S.REPARANDO, S.COMPLETADO, S.ENTREGADO):
        order = await service.update_status(None, order.id, status)

    assert order.status == "entregado"


async def test_invalid_jump_leaves_order_unchanged(service, fake_crud):
    order = await service.create(None, "cliente-1", "Pantalla rota")

    with pytest.raises(InvalidTransitionError):
        await service.update_status(None, order.id, S.ENTREGADO)

    assert fake_crud.orders[order.id].status == "recibido"


async def test_status_update_attaches_admin_details(service, fake_crud):
    order = await service.create(None, "cliente-1", "Ventilador ruidoso")

    order = await service.update_status(
        None, order.id, S.DIAGNOSTICO, "Ventilador sucio", ["https://img.example.com/1.jpg"]
    )

    assert order.admin_description == "Ventilador sucio"
    assert order.admin_images == ["https://img.example.com/1.jpg"]


async def test_legacy_stored_status_is_accepted(service, fake_crud):
    order = await service.create(None, "cliente-1", "HDMI suelto")
    fake_crud.orders[order.id].status = "Diagnóstico"

    order = await service.update_status(None, order.id, S.ESPERANDO_APROBACION)

    assert order.status == "esperando_aprobacion"


async def test_quotation_and_comments_in_any_state(service, fake_crud):
    order = await service.create(None, "cliente-1", "No lee discos")

    order = await service.set_quotation(None, order.id, 120000)
    order = await service.add_comment(None, order.id, "  ¿Cuándo estará listo?  ", CommentAuthor.CLIENT)

    assert order.quotation == 120000
    assert [c.text for c in order.comments] == [OPENING_COMMENT, "¿Cuándo estará listo?"]
    assert order.comments[-1].author == "client"


async def test_unknown_order_raises_not_found(service, fake_crud):
    with pytest.raises(ServiceOrderNotFoundError):
        await service.update_status(None, "no-existe", S.DIAGNOSTICO)


async def test_list_filters_by_client(service, fake_crud):
    await service.create(None, "cliente-1", "A")
    await service.create(None, "cliente-2", "B")

    orders = await service.list(None, client_id="cliente-2")

    assert [o.description for o in orders] == ["B"]
