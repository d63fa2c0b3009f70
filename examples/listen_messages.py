"""Print incoming instant and channel messages as they arrive."""

import os

from utopia import EventCategory, UtopiaClient

with UtopiaClient(os.environ["UTOPIA_TOKEN"], notifications=True) as client:
    if not client.notifications_available:
        raise SystemExit("notifications are not available")

    client.on(EventCategory.NEW_EMAIL, lambda event: print("mail:", event.payload))
    client.once("channelJoinChanged", lambda event: print("joined:", event.payload))

    print(f"listening on port {client.notification_port} …")
    for event in client.events(EventCategory.MESSAGE):
        print(f"{event.type}: {event.payload}")
