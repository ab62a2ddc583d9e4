# compost_client/driver_app.py
import logging

import flet as ft

from compost_client.config import client_settings
from compost_client.driver_views import RouteRunner, check_initials, contact_links, recall_initials, remember_initials
from compost_client.network import NetworkSignal, OfflineSync
from compost_client.offline_queue import JsonFileStorage, OfflineQueue
from compost_client.services.api_client import ApiClient
from compost_client.services.driver import create_pickup_event, fetch_routes, fetch_stops_by_route, queued_submitter

logger = logging.getLogger(__name__)


# ---------------- Main app ----------------
def main(page: ft.Page):
    page.title = "Compost Pickups"
    page.window_width = 480
    page.window_height = 800

    api = ApiClient(client_settings.api_base, timeout=client_settings.request_timeout)
    storage = JsonFileStorage(client_settings.queue_path)
    queue = OfflineQueue(storage)
    network = NetworkSignal(online=True)

    banner_text = ft.Text("", weight="bold")
    sync_btn = ft.ElevatedButton("Sync Now", visible=False)
    banner = ft.Container(ft.Row([banner_text, sync_btn]), padding=10, visible=False)

    def render_banner():
        text = offline_sync.banner()
        banner.visible = text is not None
        banner_text.value = text or ""
        sync_btn.visible = offline_sync.can_retry
        page.update()

    offline_sync = OfflineSync(
        queue,
        network,
        queued_submitter(api),
        poll_interval=client_settings.poll_interval,
        on_change=render_banner,
    )
    sync_btn.on_click = lambda _: offline_sync.retry()

    # the runtime has no connectivity event, so the driver flips this switch
    online_switch = ft.Switch(label="Online", value=True)

    def on_switch(_):
        network.set_online(bool(online_switch.value))
        render_banner()

    online_switch.on_change = on_switch

    content_host = ft.Container(expand=True)

    def set_screen(ctrl: ft.Control):
        content_host.content = ctrl
        page.update()

    # ===== ROUTE PICKER =====
    def show_routes(_=None):
        res = fetch_routes(api)
        if not res.ok:
            set_screen(ft.Column([
                ft.Text(f"Could not load routes: {res.error}"),
                ft.ElevatedButton("Retry", on_click=show_routes),
            ]))
            return
        rows = [
            ft.ElevatedButton(
                f"#{r['id']}  {r.get('date') or 'No date'}  {r.get('driver') or ''}",
                on_click=lambda _, rid=r["id"]: show_initials(rid),
            )
            for r in res.data
        ]
        set_screen(ft.Column([ft.Text("Routes", size=24, weight="bold"), *rows], scroll="auto"))

    # ===== INITIALS PROMPT =====
    def show_initials(route_id: int):
        res = fetch_stops_by_route(api, route_id)
        if not res.ok:
            set_screen(ft.Column([
                ft.Text(f"Could not load stops: {res.error}"),
                ft.ElevatedButton("Retry", on_click=lambda _: show_initials(route_id)),
                ft.TextButton("Back", on_click=show_routes),
            ]))
            return
        stops = res.data

        initials_tf = ft.TextField(label="Your initials", value=recall_initials(storage), width=200)
        msg = ft.Text("")

        def start(_):
            problem = check_initials(initials_tf.value)
            if problem:
                msg.value = problem
                page.update()
                return
            remember_initials(storage, initials_tf.value)
            show_runner(stops, initials_tf.value)

        set_screen(ft.Column([
            ft.Text(f"Route #{route_id} - {len(stops)} stops", size=20, weight="bold"),
            initials_tf,
            ft.ElevatedButton("Start route", on_click=start, disabled=not stops),
            msg,
            ft.TextButton("Back", on_click=show_routes),
        ]))

    # ===== RUN-THROUGH =====
    def show_runner(stops, initials: str):
        def submit(payload):
            result = create_pickup_event(payload, api, queue, network)
            offline_sync.refresh()
            return result

        runner = RouteRunner(stops, initials, submit, on_complete=lambda: show_done(len(stops)))
        notes_tf = ft.TextField(label="Notes", multiline=True)
        status = ft.Text("")

        def render():
            if runner.completed:
                return
            stop = runner.current_stop
            customer = stop.get("customer") or {}
            links = contact_links(customer)
            status.value = runner.error or runner.notice or ""
            set_screen(ft.Column([
                ft.Text(runner.progress, weight="bold"),
                ft.Text(customer.get("name") or stop["customer_id"], size=22),
                ft.Text(customer.get("address") or "No address"),
                ft.Text(links["phone"]),
                ft.Text(f"Flags: {stop['flags']}  {stop.get('flag_notes') or ''}") if stop.get("flags") else ft.Container(),
                ft.Row([
                    ft.TextButton("Map", url=links["map"], disabled=not links["map"]),
                    ft.TextButton("Call", url=links["tel"], disabled=not links["tel"]),
                    ft.TextButton("Text", url=links["sms"], disabled=not links["sms"]),
                ]),
                notes_tf,
                ft.Row([
                    ft.ElevatedButton("Picked up", on_click=on_success),
                    ft.OutlinedButton("Report issue", on_click=on_flag),
                ]),
                ft.TextButton("Previous stop", on_click=on_previous, disabled=runner.is_first),
                status,
            ], scroll="auto"))

        def on_success(_):
            if runner.succeed(notes_tf.value):
                notes_tf.value = ""
            render()

        def on_flag(_):
            if runner.flag(notes_tf.value):
                notes_tf.value = ""
            render()

        def on_previous(_):
            runner.previous()
            render()

        render()

    def show_done(count: int):
        set_screen(ft.Column([
            ft.Text("Route complete", size=24, weight="bold"),
            ft.Text(f"{count} stops logged"),
            ft.ElevatedButton("Back to routes", on_click=show_routes),
        ]))

    # ---- MOUNT ROOT + show first screen ----
    page.add(ft.Row([online_switch]), banner, content_host)
    page.on_disconnect = lambda _: offline_sync.close()
    offline_sync.start_polling()
    render_banner()
    show_routes()


def run():
    logging.basicConfig(
        level=client_settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ft.app(target=main)


# ---- Flet App bootstrap ----
if __name__ == "__main__":
    run()
