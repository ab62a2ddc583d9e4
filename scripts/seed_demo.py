import asyncio

from compost_api.db import get_client, get_db
from compost_api.repos.mongo import MongoStore

CUSTOMERS = [
    {"stripe_customer_id": "cus_demo_1", "name": "Ada Brook", "phone": "5405551234",
     "address": "100 Caroline St, Fredericksburg, VA", "subscription_type": "weekly", "status": "active"},
    {"stripe_customer_id": "cus_demo_2", "name": "Ben Carter", "phone": "15405559876",
     "address": "212 William St, Fredericksburg, VA", "subscription_type": "biweekly", "status": "active"},
    {"stripe_customer_id": "cus_demo_3", "name": "Cora Diaz",
     "address": "7 Hanover St, Fredericksburg, VA", "subscription_type": "weekly", "status": "active"},
]

async def main():
    store = MongoStore(get_db())
    await store.ensure_indexes()

    for c in CUSTOMERS:
        await store.insert_customer(c)

    route = await store.insert_route({"date": "2026-01-05", "driver": "Demo Driver", "notes": {}})
    for order, c in enumerate(CUSTOMERS, start=1):
        await store.insert_stop({
            "route_id": route["id"],
            "customer_id": c["stripe_customer_id"],
            "stop_order": order,
            "stop_type": "pickup",
            "visible_to_driver": True,
            "flags": "",
            "flag_notes": "",
        })
    print(f"Seeded: {len(CUSTOMERS)} customers, route #{route['id']}")
    get_client().close()

if __name__ == "__main__":
    asyncio.run(main())
