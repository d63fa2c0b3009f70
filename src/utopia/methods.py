"""Request shapes of every wrapped API method and the builder that fills them in."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from utopia.errors import MissingParameterError


class _Marker:
    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


# Argument has no default; the caller must supply it.
REQUIRED = _Marker("REQUIRED")
# Argument is optional and left out of the request when not supplied.
OMIT = _Marker("OMIT")


@dataclass(frozen=True)
class Param:
    name: str  # Python argument name
    wire: str  # key in the request params
    default: Any = REQUIRED


@dataclass(frozen=True)
class Operation:
    method: str
    params: tuple[Param, ...] = ()
    doc: str = ""

    @cached_property
    def signature(self) -> inspect.Signature:
        """Python signature for this operation.

        Arguments keep table order. A required argument that follows a
        defaulted one can't stay positional, so it and everything after it
        become keyword-only.
        """
        kind = inspect.Parameter.POSITIONAL_OR_KEYWORD
        seen_default = False
        parameters = []
        for param in self.params:
            if param.default is REQUIRED:
                if seen_default:
                    kind = inspect.Parameter.KEYWORD_ONLY
                parameters.append(inspect.Parameter(param.name, kind))
            else:
                seen_default = True
                default = None if param.default is OMIT else param.default
                parameters.append(inspect.Parameter(param.name, kind, default=default))
        return inspect.Signature(parameters)


def _op(method: str, *params: Param, doc: str = "") -> Operation:
    return Operation(method, params, doc)


def _p(name: str, wire: str | None = None, default: Any = REQUIRED) -> Param:
    return Param(name, wire or name, default)


# ---------------------------------------------------------------------------
# Each entry maps a client method name to the remote method it calls and the
# shape of its params. Every entry becomes a method of UtopiaClient.
# ---------------------------------------------------------------------------

OPERATIONS: dict[str, Operation] = {
    # ── System ────────────────────────────────────────────────────────
    "get_system_info": _op("getSystemInfo", doc="Version information of the running Utopia client."),
    "storage_wipe": _op("storageWipe", doc="Irrevocably remove all databases of the user."),
    "clear_tray_notifications": _op("clearTrayNotifications"),
    "get_network_connections": _op("getNetworkConnections"),
    "low_traffic_mode": _op("lowTrafficMode", doc="Status of low traffic mode."),
    "set_low_traffic_mode": _op("setLowTrafficMode", _p("enabled", default="")),
    "get_web_socket_state": _op(
        "getWebSocketState",
        doc="Notification channel state: 0 when disabled, else the listening port.",
    ),
    "set_web_socket_state": _op("setWebSocketState", _p("enabled"), _p("port")),
    "ucode_encode": _op(
        "ucodeEncode",
        _p("hex_code", "hex_code", ""),
        _p("size_image", "size_image", "256"),
        _p("coder", default="BASE64"),
        _p("format", default="PNG"),
        doc="Render the ucode image of a public key.",
    ),
    "ucode_decode": _op("ucodeDecode", _p("base64_image")),
    # ── Self ──────────────────────────────────────────────────────────
    "get_profile_status": _op("getProfileStatus"),
    "set_profile_status": _op("setProfileStatus", _p("status"), _p("mood", default=OMIT)),
    "get_own_contact": _op("getOwnContact"),
    # ── Contact groups ────────────────────────────────────────────────
    "get_contact_groups": _op("getContactGroups"),
    "get_contacts_by_group": _op("getContactsByGroup", _p("group_name", "groupName")),
    "rename_contact_group": _op(
        "renameContactGroup",
        _p("old_name", "oldGroupName"),
        _p("new_name", "newGroupName"),
    ),
    "delete_contact_group": _op("deleteContactGroup", _p("group_name", "groupName")),
    # ── Contacts and instant messages ─────────────────────────────────
    "get_contacts": _op("getContacts", _p("filter", default="")),
    "delete_contact": _op("deleteContact", _p("pk", default="")),
    "get_contact_avatar": _op(
        "getContactAvatar",
        _p("pk", default=""),
        _p("coder", default="BASE64"),
        _p("format", default="PNG"),
    ),
    "set_contact_group": _op(
        "setContactGroup",
        _p("pk", "contactPublicKey", ""),
        _p("group_name", "groupName"),
    ),
    "set_contact_nick": _op(
        "setContactNick",
        _p("pk", "contactPublicKey", ""),
        _p("new_nick", "newNick", ""),
    ),
    "send_instant_message": _op("sendInstantMessage", _p("to", default=""), _p("text", default="")),
    "send_instant_file": _op(
        "sendFileByMessage",
        _p("to", default=""),
        _p("file_id", "fileId", ""),
        doc="Send a file from the transfer manager to a contact.",
    ),
    "send_instant_quote": _op(
        "sendInstantQuote",
        _p("to", default=""),
        _p("text", default=""),
        _p("message_id", "id_message"),
    ),
    "send_instant_sticker": _op(
        "sendInstantSticker",
        _p("to", default=""),
        _p("collection"),
        _p("name"),
    ),
    "send_instant_buzz": _op("sendInstantBuzz", _p("to", default=""), _p("comments", default="")),
    "send_instant_invitation": _op(
        "sendInstantInvitation",
        _p("to", default=""),
        _p("channel_id", "channelid"),
        _p("description", default=""),
        _p("comments", default=""),
    ),
    "remove_instant_messages": _op(
        "removeInstantMessages", _p("pk", "hex_contact_public_key", ""),
    ),
    "get_contact_messages": _op("getContactMessages", _p("pk", default="")),
    "send_authorization_request": _op(
        "sendAuthorizationRequest", _p("pk", default=""), _p("message", default=""),
    ),
    "accept_authorization_request": _op(
        "acceptAuthorizationRequest", _p("pk", default=""), _p("message", default=""),
    ),
    "reject_authorization_request": _op(
        "rejectAuthorizationRequest", _p("pk", default=""), _p("message", default=""),
    ),
    # ── Stickers ──────────────────────────────────────────────────────
    "get_sticker_collections": _op("getStickerCollections"),
    "get_sticker_names_by_collection": _op(
        "getStickerNamesByCollection", _p("collection_name", "collection_name"),
    ),
    "get_image_sticker": _op(
        "getImageSticker",
        _p("collection_name", "collection_name"),
        _p("sticker_name", "sticker_name"),
        _p("coder", default="BASE64"),
    ),
    # ── Mail ──────────────────────────────────────────────────────────
    "send_email_message": _op(
        "sendEmailMessage",
        _p("to", default=""),
        _p("subject", default="No subject"),
        _p("body", default=""),
    ),
    "get_email_folder": _op(
        "getEmailFolder", _p("folder_type", "folderType", "1"), _p("filter", default=""),
    ),
    "get_emails": _op("getEmails", _p("folder_type", "folderType", "1"), _p("filter", default="")),
    "get_email_by_id": _op("getEmailById", _p("email_id", "id", "")),
    "delete_email": _op("deleteEmail", _p("email_id", "id", "")),
    "send_reply_email_message": _op(
        "sendReplyEmailMessage", _p("email_id", "id", ""), _p("body", default=""),
    ),
    "send_forward_email_message": _op(
        "sendForwardEmailMessage",
        _p("email_id", "id", ""),
        _p("to", default=""),
        _p("body", default=""),
    ),
    # ── Economics ─────────────────────────────────────────────────────
    "get_finance_system_information": _op("getFinanceSystemInformation"),
    "get_balance": _op("getBalance"),
    "send_payment": _op(
        "sendPayment",
        _p("card_id", "cardid", ""),
        _p("to", default=""),
        _p("amount"),
        _p("comment", default=""),
    ),
    "get_finance_history": _op(
        "getFinanceHistory",
        _p("filters", default=""),
        _p("reference_number", "referenceNumber", ""),
        _p("to_date", "toDate", ""),
        _p("from_date", "fromDate", ""),
        _p("batch_id", "batchId", ""),
        _p("from_amount", "fromAmount", ""),
        _p("to_amount", "toAmount", ""),
    ),
    "get_transaction_id_by_reference_number": _op(
        "getTransactionIdByReferenceNumber", _p("reference_number", "referenceNumber"),
    ),
    # ── Cards ─────────────────────────────────────────────────────────
    "get_cards": _op("getCards"),
    "add_card": _op(
        "addCard",
        _p("name"),
        _p("color", default=""),
        _p("numbers", "preorderNumberInCard", ""),
    ),
    "delete_card": _op("deleteCard", _p("card_id", "cardid", "")),
    # ── Mining and treasury ───────────────────────────────────────────
    "enable_mining": _op("enableMining", _p("enabled", "enable", "true")),
    "enable_pos": _op("enablePoS", _p("enabled", "enable")),
    "enable_interest": _op("enableInterest", _p("enabled", "enable", "true")),
    "request_treasury_pos_rates": _op("requestTreasuryPoSRates"),
    "get_treasury_pos_rates": _op("getTreasuryPoSRates"),
    "request_treasury_interest_rates": _op("requestTreasuryInterestRates"),
    "get_treasury_interest_rates": _op("getTreasuryInterestRates"),
    "request_treasury_transaction_volumes": _op("requestTreasuryTransactionVolumes"),
    "get_treasury_transaction_volumes": _op("getTreasuryTransactionVolumes"),
    "enable_history_mining": _op("enableHistoryMining", _p("enabled", "enable", "true")),
    "status_history_mining": _op("statusHistoryMining"),
    "get_mining_blocks": _op("getMiningBlocks"),
    "get_mining_info": _op("getMiningInfo"),
    # ── Vouchers ──────────────────────────────────────────────────────
    "get_vouchers": _op("getVouchers"),
    "create_voucher": _op("createVoucher", _p("amount")),
    "use_voucher": _op("useVoucher", _p("voucher_id", "voucherid")),
    "delete_voucher": _op("deleteVoucher", _p("voucher_id", "voucherid")),
    # ── Invoices ──────────────────────────────────────────────────────
    "get_invoices": _op(
        "getInvoices",
        _p("card_id", "cardId", ""),
        _p("invoice_id", "invoiceId", ""),
        _p("pk", default=""),
        _p("transaction_id", "transactionId", ""),
        _p("status", default=""),
        _p("start_date_time", "startDateTime", ""),
        _p("end_date_time", "endDateTime", ""),
        _p("reference_number", "referenceNumber", ""),
    ),
    "get_invoice_by_reference_number": _op(
        "getInvoiceByReferenceNumber", _p("reference_number", "referenceNumber"),
    ),
    "send_invoice": _op(
        "sendInvoice",
        _p("card_id", "cardid", ""),
        _p("amount", default=""),
        _p("comment", default=""),
    ),
    "accept_invoice": _op("acceptInvoice", _p("invoice_id", "invoiceid", "")),
    "decline_invoice": _op("declineInvoice", _p("invoice_id", "invoiceid", "")),
    "cancel_invoice": _op("cancelInvoice", _p("invoice_id", "invoiceid", "")),
    # ── uNS transfers ─────────────────────────────────────────────────
    "request_uns_transfer": _op(
        "requestUnsTransfer", _p("name", default=""), _p("new_owner_pk", "hexNewOwnerPk", ""),
    ),
    "accept_uns_transfer": _op("acceptUnsTransfer", _p("request_id", "requestid", "")),
    "decline_uns_transfer": _op("declineUnsTransfer", _p("request_id", "requestid", "")),
    "incoming_uns_transfer": _op("incomingUnsTransfer"),
    "outgoing_uns_transfer": _op("outgoingUnsTransfer"),
    # ── Channels ──────────────────────────────────────────────────────
    "get_channels": _op(
        "getChannels", _p("filter", default=""), _p("channel_type", "channel_type", ""),
    ),
    "send_channel_message": _op(
        "sendChannelMessage", _p("channel_id", "channelid"), _p("message"),
    ),
    "send_channel_picture": _op(
        "sendChannelPicture",
        _p("channel_id", "channelid", ""),
        _p("data", "base64_image"),
        _p("filename", "filename_image"),
    ),
    "join_channel": _op("joinChannel", _p("channel_id", "ident", ""), _p("password", default="")),
    "leave_channel": _op("leaveChannel", _p("channel_id", "channelid", "")),
    "get_channel_messages": _op("getChannelMessages", _p("channel_id", "channelid", "")),
    "get_channel_info": _op("getChannelInfo", _p("channel_id", "channelid", "")),
    "get_channel_avatar": _op(
        "getChannelAvatar",
        _p("channel_id", "channelid"),
        _p("coder", default="BASE64"),
        _p("format", default="PNG"),
    ),
    "get_channel_moderators": _op("getChannelModerators", _p("channel_id", "channelid", "")),
    "get_channel_contacts": _op("getChannelContacts", _p("channel_id", "channelid", "")),
    "get_channel_moderator_right": _op(
        "getChannelModeratorRight",
        _p("channel_id", "channelid", ""),
        _p("moderator", default=""),
    ),
    "create_channel": _op(
        "createChannel",
        _p("channel_name", "channel_name", ""),
        _p("description", default=""),
        _p("read_only", "read_only", ""),
        _p("password", default=""),
        _p("language", default=""),
        _p("hashtags", default=""),
        _p("geo_tag", "geoTag", ""),
        _p("base64_avatar_image", "base64_avatar_image", ""),
        _p("hide_in_ui", "hide_in_UI", ""),
    ),
    "modify_channel": _op(
        "modifyChannel",
        _p("channel_id", "channelid", ""),
        _p("description", default=""),
        _p("read_only", "read_only", ""),
        _p("language", default=""),
        _p("hashtags", default=""),
        _p("geo_tag", "geoTag", ""),
        _p("base64_avatar_image", "base64_avatar_image", ""),
        _p("hide_in_ui", "hide_in_UI", ""),
    ),
    "delete_channel": _op("deleteChannel", _p("channel_id", "channelid", "")),
    "get_channel_system_info": _op("getChannelSystemInfo"),
    # The remote method names really are spelled "Conacts".
    "get_channel_banned_contacts": _op(
        "getChannelBannedConacts", _p("channel_id", "channelid"),
    ),
    "apply_channel_banned_contacts": _op(
        "applyChannelBannedConacts", _p("channel_id", "channelid"), _p("new_list", "newList"),
    ),
    # ── uNS records ───────────────────────────────────────────────────
    "uns_create_record_request": _op(
        "unsCreateRecordRequest",
        _p("nick", default=""),
        _p("valid", default=""),
        _p("is_primary", "isPrimary", ""),
        _p("channel_id", "channelId", ""),
    ),
    "uns_modify_record_request": _op(
        "unsModifyRecordRequest",
        _p("nick", default=""),
        _p("valid", default=""),
        _p("is_primary", "isPrimary", ""),
        _p("channel_id", "channelId", ""),
    ),
    "uns_delete_record_request": _op("unsDeleteRecordRequest", _p("nick", default="")),
    "uns_search_by_pk": _op("unsSearchByPk", _p("filter", default="")),
    "uns_search_by_nick": _op("unsSearchByNick", _p("filter", default="")),
    "get_uns_sync_info": _op("getUnsSyncInfo"),
    "uns_registered_names": _op("unsRegisteredNames"),
    "summary_uns_registered_names": _op(
        "summaryUnsRegisteredNames",
        _p("date_from", "from_date", ""),
        _p("date_to", "to_date", ""),
    ),
    "get_whois_info": _op("getWhoIsInfo", _p("name_or_pk", "owner", "")),
    # ── uNS proxy mappings ────────────────────────────────────────────
    "get_proxy_mappings": _op("getProxyMappings"),
    "create_proxy_mapping": _op(
        "createProxyMapping",
        _p("src_host", "srcHost", ""),
        _p("src_port", "srcPort", ""),
        _p("dst_host", "dstHost", ""),
        _p("dst_port", "dstPort", ""),
        _p("enabled", default="true"),
    ),
    "enable_proxy_mapping": _op("enableProxyMapping", _p("mapping_id", "mappingId", "")),
    "disable_proxy_mapping": _op("disableProxyMapping", _p("mapping_id", "mappingId", "")),
    "remove_proxy_mapping": _op("removeProxyMapping", _p("mapping_id", "mappingId", "")),
    # ── Transfer manager ──────────────────────────────────────────────
    "get_transfers_from_manager": _op("getTransfersFromManager"),
    "get_files_from_manager": _op("getFilesFromManager"),
    "abort_transfer": _op("abortTransfers", _p("transfer_id", "transferId")),
    "hide_transfer": _op("hideTransfers", _p("transfer_id", "transferId")),
    "get_file": _op("getFile", _p("file_id", "fileId")),
    "delete_file": _op("deleteFile", _p("file_id", "fileId")),
    "upload_file": _op(
        "uploadFile", _p("data", "fileDataBase64"), _p("filename", "fileName"),
    ),
}


def list_methods() -> list[str]:
    """Return sorted list of wrapped method names."""
    return sorted(OPERATIONS.keys())


def get_operation(name: str) -> Operation:
    """Look up an operation by method name. Raises KeyError if unknown."""
    try:
        return OPERATIONS[name]
    except KeyError:
        raise KeyError(f"method {name!r} is not available; see list_methods() for the full list")


def build_params(operation: Operation, *args: Any, **kwargs: Any) -> dict[str, Any]:
    """Bind call arguments to *operation* and return its wire params.

    Omitted arguments (or ``None``) take the table default. Arguments marked
    ``OMIT`` are left out entirely when not given.
    """
    try:
        bound = operation.signature.bind(*args, **kwargs)
    except TypeError as exc:
        raise MissingParameterError(f"{operation.method}: {exc}") from None

    params: dict[str, Any] = {}
    for param in operation.params:
        value = bound.arguments.get(param.name)
        if value is None:
            if param.default is REQUIRED:
                raise MissingParameterError(
                    f"{operation.method}: argument {param.name!r} must not be None",
                )
            if param.default is OMIT:
                continue
            value = param.default
        params[param.wire] = value
    return params
