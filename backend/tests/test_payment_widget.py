from tienda_gamer.schemas.checkout_schema import SubmitAck
from tienda_gamer.services.payment_widget import RemoteBrickWidget, WidgetCallbacks, WidgetConfig


def _config(events):
    async def on_submit(data):
        events.append(("submit", data))
        return SubmitAck(status="success")

    return WidgetConfig(
        amount=25000,
        payer_email="gamer@example.com",
        callbacks=WidgetCallbacks(
            on_ready=lambda: events.append(("ready", None)),
            on_submit=on_submit,
            on_error=lambda err: events.append(("error", err)),
        ),
    )


def test_sdk_requires_public_key():
    assert RemoteBrickWidget(public_key="APP_USR-x").sdk_available()
    assert not RemoteBrickWidget(public_key="").sdk_available()


def test_only_known_containers_are_available():
    widget = RemoteBrickWidget(public_key="k", containers=["checkout"])
    assert widget.has_container("checkout")
    assert not widget.has_container("otro")


async def test_brick_config_carries_amount_and_payer():
    widget = RemoteBrickWidget(public_key="APP_USR-x", containers=["checkout"])
    handle = await widget.mount("checkout", _config([]))

    brick = handle.brick_config()

    assert brick.container_id == "checkout"
    assert brick.public_key == "APP_USR-x"
    assert brick.initialization == {"amount": 25000, "payer": {"email": "gamer@example.com"}}
    assert widget.mounted_handle("checkout") is handle


async def test_mount_replaces_previous_instance():
    widget = RemoteBrickWidget(public_key="k", containers=["checkout"])
    events = []
    first = await widget.mount("checkout", _config(events))
    second = await widget.mount("checkout", _config(events))

    assert not first.mounted
    assert second.mounted
    assert widget.mounted_handle("checkout") is second

    ack = await first.submit({"token": "t"})
    assert ack.status == "error"
    assert events == []


async def test_callbacks_are_forwarded_while_mounted():
    widget = RemoteBrickWidget(public_key="k", containers=["checkout"])
    events = []
    handle = await widget.mount("checkout", _config(events))

    handle.report_ready()
    ack = await handle.submit({"token": "t"})
    handle.report_error("cardNumber inválido")

    assert ack.status == "success"
    assert events == [("ready", None), ("submit", {"token": "t"}), ("error", "cardNumber inválido")]


async def test_clear_container_silences_handle():
    widget = RemoteBrickWidget(public_key="k", containers=["checkout"])
    events = []
    handle = await widget.mount("checkout", _config(events))

    widget.clear_container("checkout")
    handle.report_ready()

    assert widget.mounted_handle("checkout") is None
    assert events == []
