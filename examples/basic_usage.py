"""Basic example: check the client version, list contacts, send a message."""

import os

from utopia import UtopiaClient

client = UtopiaClient(os.environ["UTOPIA_TOKEN"])

print("System:", client.get_system_info())

contacts = client.get_contacts()
print("Contacts:", contacts.get("result"))

# Nicknames and messages take the contact's public key
client.set_contact_nick("8D2A6AB76AB7F6D4E0A0A3C0E1B2A9C5D6E7F8091A2B3C4D5E6F708192A3B4C5", "Bob")
client.send_instant_message(to="Bob", text="Hello from Python")

# Any remote method can also be called directly
print(client.send_request("getBalance"))

client.close()
