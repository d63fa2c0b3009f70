"""Upload a local file and send it to a contact."""

import os
import sys

from utopia import FileAccessError, UtopiaClient

path, contact = sys.argv[1], sys.argv[2]

with UtopiaClient(os.environ["UTOPIA_TOKEN"]) as client:
    try:
        uploaded = client.upload_file(path)
    except FileAccessError as exc:
        raise SystemExit(str(exc))
    print("Uploaded:", uploaded)
    client.send_instant_file(contact, uploaded["result"])
