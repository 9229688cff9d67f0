from __future__ import annotations

import json
import logging
import webbrowser

import customtkinter as ctk

from near_client.config import AppSettings, ConfigurationError
from near_client.logging_utils import configure_logging
from near_client.models import Error, Loading, RpcEndpoint, Success, UiState, WalletState
from near_client.repository import NearRepository
from near_client.services import NearService

logger = logging.getLogger(__name__)


class MainWindow(ctk.CTk):
	def __init__(self, service: NearService):
		super().__init__()
		self._service = service
		self.title("NEAR JSON-RPC Test Client")
		self.geometry("1100x800")
		self.minsize(960, 700)

		self._status_label = ctk.CTkLabel(self, text="Wallet not connected")
		self._status_label.pack(anchor="w", padx=16, pady=(16, 8))

		self._request_progress_label = ctk.CTkLabel(self, text="")
		self._request_progress_label.pack(anchor="w", padx=16, pady=(0, 4))

		self._request_progress_bar = ctk.CTkProgressBar(self)
		self._request_progress_bar.pack(fill="x", padx=16, pady=(0, 8))
		self._request_progress_bar.set(0)

		self._progress_active = False
		self._progress_total_seconds = max(1, int(self._service.request_timeout_seconds))
		self._progress_elapsed_seconds = 0.0
		self._progress_update_interval_seconds = 0.1
		self._set_progress_idle()

		action_row = ctk.CTkFrame(self)
		action_row.pack(fill="x", padx=16, pady=(0, 8))

		self._login_btn = ctk.CTkButton(action_row, text="Login with Wallet", command=self._open_wallet_login)
		self._login_btn.pack(side="left", padx=(8, 6), pady=8)

		self._connect_account = ctk.CTkEntry(action_row, placeholder_text="account.testnet", width=220)
		self._connect_account.pack(side="left", padx=6, pady=8)

		self._connect_btn = ctk.CTkButton(action_row, text="Connect", command=self._connect_wallet)
		self._connect_btn.pack(side="left", padx=6, pady=8)

		self._disconnect_btn = ctk.CTkButton(action_row, text="Disconnect", command=self._disconnect_wallet)
		self._disconnect_btn.pack(side="left", padx=6, pady=8)

		self._error_label = ctk.CTkLabel(self, text="", text_color="#d14343")
		self._error_label.pack(anchor="w", padx=16, pady=(0, 4))

		self._tabview = ctk.CTkTabview(self, height=200)
		self._tabview.pack(fill="x", padx=16, pady=(0, 8))

		self._tabview.add("Endpoints")
		self._tabview.add("Account")
		self._tabview.add("Contract")
		self._tabview.add("Transaction")
		self._tabview.add("Callback")

		endpoints_tab = self._tabview.tab("Endpoints")
		self._endpoint_choice = ctk.StringVar(value=self._service.state.selected_endpoint.display_name)
		ctk.CTkOptionMenu(
			endpoints_tab,
			values=[endpoint.display_name for endpoint in RpcEndpoint.all()],
			variable=self._endpoint_choice,
			command=self._select_endpoint,
		).pack(anchor="w", padx=12, pady=(12, 6))

		self._chunk_hash = ctk.CTkEntry(endpoints_tab, placeholder_text="Chunk hash (Chunk Details only)")
		self._chunk_hash.pack(fill="x", padx=12, pady=4)

		self._block_id = ctk.CTkEntry(endpoints_tab, placeholder_text="Block ID (State Changes only)")
		self._block_id.pack(fill="x", padx=12, pady=4)

		ctk.CTkButton(endpoints_tab, text="Fetch", command=self._fetch_endpoint).pack(
			anchor="w", padx=12, pady=8
		)

		account_tab = self._tabview.tab("Account")
		self._account_id = ctk.CTkEntry(account_tab, placeholder_text="Account ID (required)")
		self._account_id.pack(fill="x", padx=12, pady=(12, 6))
		ctk.CTkButton(account_tab, text="Query Account", command=self._query_account).pack(
			anchor="w", padx=12, pady=8
		)

		contract_tab = self._tabview.tab("Contract")
		self._contract_id = ctk.CTkEntry(contract_tab, placeholder_text="Contract ID (required)")
		self._contract_id.pack(fill="x", padx=12, pady=(12, 4))
		self._method_name = ctk.CTkEntry(contract_tab, placeholder_text="View method name (required)")
		self._method_name.pack(fill="x", padx=12, pady=4)
		self._method_args = ctk.CTkEntry(contract_tab, placeholder_text="Arguments as JSON")
		self._method_args.pack(fill="x", padx=12, pady=4)
		self._method_args.insert(0, "{}")
		ctk.CTkButton(contract_tab, text="Call View Method", command=self._call_view_method).pack(
			anchor="w", padx=12, pady=8
		)

		transaction_tab = self._tabview.tab("Transaction")
		self._tx_hash = ctk.CTkEntry(transaction_tab, placeholder_text="Transaction hash (required)")
		self._tx_hash.pack(fill="x", padx=12, pady=(12, 4))
		self._tx_account = ctk.CTkEntry(transaction_tab, placeholder_text="Sender account ID (required)")
		self._tx_account.pack(fill="x", padx=12, pady=4)
		ctk.CTkButton(transaction_tab, text="Transaction Status", command=self._transaction_status).pack(
			anchor="w", padx=12, pady=8
		)

		callback_tab = self._tabview.tab("Callback")
		self._callback_uri = ctk.CTkEntry(
			callback_tab,
			placeholder_text="myapp://callback?account_id=alice.testnet",
		)
		self._callback_uri.pack(fill="x", padx=12, pady=(12, 6))
		ctk.CTkButton(callback_tab, text="Handle Callback", command=self._handle_callback).pack(
			anchor="w", padx=12, pady=8
		)

		self._formatted_output, self._raw_output = self._create_output_panes(self, height=360)

		self._unsubscribe_state = self._service.subscribe(
			lambda state: self.after(0, lambda: self._render_state(state))
		)
		self._unsubscribe_wallet = self._service.subscribe_wallet(
			lambda state: self.after(0, lambda: self._render_wallet(state))
		)
		self._render_wallet(self._service.wallet_state)
		self.protocol("WM_DELETE_WINDOW", self._on_close)

	def _on_close(self):
		self._unsubscribe_state()
		self._unsubscribe_wallet()
		self._service.close()
		self.destroy()

	def _select_endpoint(self, display_name: str):
		self._service.set_selected_endpoint(RpcEndpoint.from_display_name(display_name))

	def _fetch_endpoint(self):
		block_id: int | str | None = self._block_id.get().strip() or None
		if isinstance(block_id, str) and block_id.isdigit():
			block_id = int(block_id)
		self._service.fetch_endpoint(
			self._service.state.selected_endpoint,
			chunk_hash=self._chunk_hash.get().strip() or None,
			block_id=block_id,
		)

	def _query_account(self):
		self._service.query_account(self._account_id.get())

	def _call_view_method(self):
		self._service.call_view_method(
			self._contract_id.get(),
			self._method_name.get(),
			self._method_args.get().strip() or "{}",
		)

	def _transaction_status(self):
		self._service.get_transaction_status(self._tx_hash.get(), self._tx_account.get())

	def _open_wallet_login(self):
		url = self._service.get_wallet_login_url()
		logger.info("Opening wallet login: %s", url)
		webbrowser.open(url)

	def _connect_wallet(self):
		self._service.connect_wallet(self._connect_account.get().strip())

	def _disconnect_wallet(self):
		self._service.disconnect_wallet()

	def _handle_callback(self):
		account_id = self._service.handle_wallet_callback(self._callback_uri.get())
		if account_id is None:
			self._error_label.configure(text="Wallet callback did not connect an account")

	def _render_state(self, state: UiState):
		if state.is_loading and not self._progress_active:
			self._start_request_progress()
		elif not state.is_loading and self._progress_active:
			self._stop_request_progress()

		self._error_label.configure(text=state.error.display_message() if state.error else "")

		match state.result:
			case Loading():
				formatted_text = "Running request..." if state.is_loading else "No request yet."
				raw_text = formatted_text
			case Success(data=data):
				raw_text = json.dumps(data, indent=2)
				formatted_text = self._extract_formatted_text(state.last_endpoint, data)
			case Error(error=error):
				formatted_text = error.display_message()
				raw_text = repr(error)

		self._render_output(self._formatted_output, formatted_text)
		self._render_output(self._raw_output, raw_text)

	def _render_wallet(self, state: WalletState):
		if state.is_connected:
			balance = f" | Balance: {self._format_yocto(state.balance)} NEAR" if state.balance else ""
			self._status_label.configure(text=f"Connected as {state.account_id}{balance}")
			self._disconnect_btn.configure(state="normal")
		else:
			self._status_label.configure(text="Wallet not connected")
			self._disconnect_btn.configure(state="disabled")

	def _set_progress_idle(self):
		self._request_progress_label.configure(
			text=f"Request timeout: {self._progress_total_seconds}s"
		)
		self._request_progress_bar.set(0)

	def _start_request_progress(self):
		self._progress_active = True
		self._progress_elapsed_seconds = 0.0
		self._request_progress_bar.set(0)
		self._tick_request_progress()

	def _tick_request_progress(self):
		if not self._progress_active:
			return

		self._progress_elapsed_seconds += self._progress_update_interval_seconds
		progress = min(1.0, self._progress_elapsed_seconds / self._progress_total_seconds)
		self._request_progress_bar.set(progress)
		self._request_progress_label.configure(
			text=(
				f"Request in progress: {self._progress_elapsed_seconds:.1f}s / "
				f"{self._progress_total_seconds}s (timeout window)"
			)
		)

		self.after(
			int(self._progress_update_interval_seconds * 1000),
			self._tick_request_progress,
		)

	def _stop_request_progress(self):
		self._progress_active = False
		self._set_progress_idle()

	def _create_output_panes(self, parent, height: int):
		container = ctk.CTkFrame(parent)
		container.pack(fill="both", expand=True, padx=16, pady=(4, 16))
		container.grid_columnconfigure(0, weight=1)
		container.grid_columnconfigure(1, weight=1)
		container.grid_rowconfigure(1, weight=1)

		ctk.CTkLabel(container, text="Summary").grid(row=0, column=0, sticky="w", padx=(8, 6), pady=(8, 4))
		ctk.CTkLabel(container, text="Raw JSON").grid(row=0, column=1, sticky="w", padx=(6, 8), pady=(8, 4))

		formatted_widget = ctk.CTkTextbox(container, height=height)
		formatted_widget.grid(row=1, column=0, sticky="nsew", padx=(8, 6), pady=(0, 8))

		raw_widget = ctk.CTkTextbox(container, height=height)
		raw_widget.grid(row=1, column=1, sticky="nsew", padx=(6, 8), pady=(0, 8))

		return formatted_widget, raw_widget

	@staticmethod
	def _render_output(text_widget: ctk.CTkTextbox, text: str):
		text_widget.delete("1.0", "end")
		text_widget.insert("1.0", text)

	@staticmethod
	def _extract_formatted_text(label: str | None, data: object) -> str:
		heading = label or "Result"
		if not isinstance(data, dict):
			return f"{heading}\n{data}"

		lines = [heading]
		sync_info = data.get("sync_info")
		if isinstance(sync_info, dict):
			lines.append(f"Chain: {data.get('chain_id', '?')}")
			lines.append(f"Latest block: {sync_info.get('latest_block_height', '?')}")
			lines.append(f"Syncing: {sync_info.get('syncing', '?')}")

		header = data.get("header")
		if isinstance(header, dict):
			lines.append(f"Height: {header.get('height', '?')}")
			lines.append(f"Hash: {header.get('hash', '?')}")

		if "amount" in data:
			lines.append(f"Balance: {MainWindow._format_yocto(str(data['amount']))} NEAR")
			lines.append(f"Storage usage: {data.get('storage_usage', '?')} bytes")

		if "gas_price" in data:
			lines.append(f"Gas price: {data['gas_price']}")

		raw_result = data.get("result")
		if isinstance(raw_result, list) and all(isinstance(item, int) and 0 <= item < 256 for item in raw_result):
			decoded = bytes(raw_result).decode("utf-8", errors="replace")
			lines.append(f"Returned: {decoded}")

		if len(lines) == 1:
			lines.append(f"{len(data)} top-level fields, see raw JSON.")
		return "\n".join(lines)

	@staticmethod
	def _format_yocto(amount: str | None) -> str:
		if not amount or not amount.isdigit():
			return amount or "?"
		whole, fraction = divmod(int(amount), 10**24)
		return f"{whole}.{fraction:024d}".rstrip("0").rstrip(".")


def build_service(settings: AppSettings | None = None) -> NearService:
	settings = settings or AppSettings.from_env()
	return NearService(NearRepository(settings))


def run_app(callback_uri: str | None = None) -> None:
	try:
		settings = AppSettings.from_env()
	except ConfigurationError as exc:
		configure_logging()
		app = ctk.CTk()
		app.title("NEAR Client - Configuration Error")
		app.geometry("760x360")
		message = ctk.CTkTextbox(app)
		message.pack(fill="both", expand=True, padx=16, pady=16)
		message.insert(
			"1.0",
			"Configuration error. Fix the environment variables and restart:\n\n"
			f"{exc}\n\n"
			"Settings:\n"
			"- NEAR_RPC_URL\n"
			"- NEAR_TIMEOUT_SECONDS\n"
			"- NEAR_WALLET_URL\n"
			"- NEAR_CONTRACT_ID\n",
		)
		app.mainloop()
		return

	configure_logging(settings.log_level)
	ctk.set_appearance_mode("System")
	ctk.set_default_color_theme("blue")

	service = build_service(settings)
	window = MainWindow(service)
	if callback_uri:
		service.handle_wallet_callback(callback_uri)
	try:
		window.mainloop()
	finally:
		service.close()
