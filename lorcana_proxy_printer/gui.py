import logging
import os
import queue
import threading
import tkinter as tk
import webbrowser
from pathlib import Path
from tkinter import filedialog, messagebox, ttk

from PIL import ImageTk

from .card_store import CardStore
from .config import CARDS_PER_PAGE, CARDS_PER_ROW, PrintSettings
from .errors import CardSourceError, EmptyCollectionError
from .image_loader import load_image
from .pdf_generator import EMPTY_COLLECTION_MESSAGE, RenderState, generate_pdf
from .sources import entries_from_files, entry_from_search_result, entry_from_url, import_decklist, search

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = (100, 140)

STATE_MESSAGES = {
    RenderState.LOADING: "Loading card images...",
    RenderState.RASTERIZING: "Drawing pages...",
    RenderState.ASSEMBLING: "Generating PDF...",
    RenderState.DONE: "PDF generation complete!",
    RenderState.FAILED: "PDF generation failed.",
}
STATE_PROGRESS = {
    RenderState.LOADING: 10,
    RenderState.RASTERIZING: 50,
    RenderState.ASSEMBLING: 75,
    RenderState.DONE: 100,
}


class ProxyPrinterGUI(tk.Tk):
    def __init__(self, settings=None):
        super().__init__()
        self.title("Lorcana Proxy Printer")
        self.resizable(True, True)

        self.settings = settings or PrintSettings()
        self.store = CardStore()
        self.search_results = []

        self.search_query = tk.StringVar()
        self.card_url = tk.StringVar()
        self.output_pdf = tk.StringVar(value="lorcana_proxies_print.pdf")
        self.status_text = tk.StringVar(value="Idle")
        self.page_text = tk.StringVar()
        self.queue = queue.Queue()
        self._thumbnails = {}
        self._thumbnail_requests = set()

        self.create_widgets()
        self.refresh_slots()
        self._start_queue_checker()

    def create_widgets(self):
        main_frame = tk.Frame(self, padx=10, pady=10)
        main_frame.pack(expand=True, fill="both")

        controls = tk.Frame(main_frame)
        controls.pack(side=tk.LEFT, fill="y", padx=(0, 10))

        # Search
        tk.Label(controls, text="Search cards:").pack(anchor="w", pady=(0, 2))
        search_frame = tk.Frame(controls)
        search_frame.pack(fill="x")
        search_entry = tk.Entry(search_frame, textvariable=self.search_query, width=30)
        search_entry.pack(side=tk.LEFT, padx=(0, 5))
        search_entry.bind("<Return>", lambda e: self.start_search())
        self.search_button = tk.Button(search_frame, text="Search", command=self.start_search)
        self.search_button.pack(side=tk.LEFT)

        self.results_list = tk.Listbox(controls, height=12, width=45)
        self.results_list.pack(fill="x", pady=5)
        self.results_list.bind("<Double-Button-1>", lambda e: self.add_selected_result())
        tk.Button(controls, text="Add Selected", command=self.add_selected_result).pack(anchor="w")

        # Direct URL
        tk.Label(controls, text="Image URL:").pack(anchor="w", pady=(10, 2))
        url_frame = tk.Frame(controls)
        url_frame.pack(fill="x")
        url_entry = tk.Entry(url_frame, textvariable=self.card_url, width=30)
        url_entry.pack(side=tk.LEFT, padx=(0, 5))
        url_entry.bind("<Return>", lambda e: self.start_add_url())
        tk.Button(url_frame, text="Add", command=self.start_add_url).pack(side=tk.LEFT)

        tk.Button(controls, text="Upload Images", command=self.upload_files, width=20).pack(pady=(10, 2))
        tk.Button(controls, text="Import from Clipboard", command=self.start_clipboard_import, width=20).pack(pady=2)
        tk.Button(controls, text="Clear All", command=self.clear_all, width=20).pack(pady=2)

        # Output PDF file selection
        tk.Label(controls, text="Output PDF File:").pack(anchor="w", pady=(10, 2))
        out_frame = tk.Frame(controls)
        out_frame.pack(fill="x")
        tk.Entry(out_frame, textvariable=self.output_pdf, width=30).pack(side=tk.LEFT, padx=(0, 5))
        tk.Button(out_frame, text="Browse", command=self.browse_output).pack(side=tk.LEFT)

        self.generate_button = tk.Button(controls, text="Generate PDF", command=self.start_generation, width=20)
        self.generate_button.pack(pady=10)

        # Status and progress bar
        tk.Label(controls, textvariable=self.status_text).pack(pady=5)
        self.progress_bar = ttk.Progressbar(controls, orient="horizontal", length=300, mode="determinate")
        self.progress_bar.pack(pady=5)

        # Error log text area
        tk.Label(controls, text="Error Log:").pack(anchor="w", pady=(10, 0))
        self.error_text = tk.Text(controls, height=6, width=45, state="disabled")
        self.error_text.pack()

        # Card slots for the current page
        slots_area = tk.Frame(main_frame)
        slots_area.pack(side=tk.LEFT, expand=True, fill="both")
        grid = tk.Frame(slots_area)
        grid.pack()
        self.slot_labels = []
        self.slot_buttons = []
        for i in range(CARDS_PER_PAGE):
            cell = tk.Frame(grid, bd=2, relief="groove", width=THUMBNAIL_SIZE[0] + 20,
                            height=THUMBNAIL_SIZE[1] + 40)
            cell.grid(row=i // CARDS_PER_ROW, column=i % CARDS_PER_ROW, padx=5, pady=5)
            cell.pack_propagate(False)
            label = tk.Label(cell, wraplength=THUMBNAIL_SIZE[0], compound="top")
            label.pack(expand=True, fill="both")
            button = tk.Button(cell, text="×", command=lambda slot=i: self.remove_slot(slot))
            button.pack(side=tk.BOTTOM)
            self.slot_labels.append(label)
            self.slot_buttons.append(button)

        nav = tk.Frame(slots_area)
        nav.pack(pady=5)
        tk.Button(nav, text="< Prev", command=lambda: self.change_page(-1)).pack(side=tk.LEFT)
        tk.Label(nav, textvariable=self.page_text, width=20).pack(side=tk.LEFT)
        tk.Button(nav, text="Next >", command=lambda: self.change_page(1)).pack(side=tk.LEFT)

    def _start_queue_checker(self):
        """Start checking for GUI updates from worker threads."""
        self.after(100, self._process_queue)

    def _process_queue(self):
        """Process any pending GUI updates from the queue."""
        try:
            while True:
                action, args = self.queue.get_nowait()
                if action == "status":
                    self.status_text.set(args[0])
                elif action == "progress":
                    self.progress_bar["value"] = args[0]
                elif action == "error":
                    self.log_error(args[0])
                elif action == "results":
                    self._show_results(*args)
                elif action == "cards":
                    self._commit_cards(*args)
                elif action == "clear_url":
                    self.card_url.set("")
                elif action == "thumbnail":
                    self._set_thumbnail(*args)
                elif action == "complete":
                    self._handle_completion(*args)
                self.update_idletasks()
                self.queue.task_done()
        except queue.Empty:
            pass
        finally:
            # Check queue again after 100ms
            self.after(100, self._process_queue)

    def queue_action(self, action, *args):
        """Thread-safe way to queue GUI updates."""
        self.queue.put((action, args))

    def run_in_background(self, target, *args):
        thread = threading.Thread(target=target, args=args)
        thread.daemon = True
        thread.start()
        return thread

    # Card sources

    def start_search(self):
        query = self.search_query.get()
        if not query.strip():
            self._show_results([])
            return
        self.search_button.config(state="disabled")
        self.status_text.set(f"Searching for '{query.strip()}'...")
        self.run_in_background(self._search_worker, query, self.store.generation)

    def _search_worker(self, query, generation):
        self.queue_action("results", search(query), generation)

    def _show_results(self, results, generation=None):
        self.search_button.config(state="normal")
        if generation is not None and generation != self.store.generation:
            logger.info("Discarding search results from before the collection was cleared")
            return
        self.search_results = results
        self.results_list.delete(0, tk.END)
        for card in results:
            label = card.get("name", "?")
            if card.get("version"):
                label += f" - {card['version']}"
            set_name = (card.get("set") or {}).get("name")
            if set_name:
                label += f" ({set_name})"
            self.results_list.insert(tk.END, label)
        self.status_text.set(f"{len(results)} result(s)" if results else "No results")

    def add_selected_result(self):
        selection = self.results_list.curselection()
        if not selection:
            return
        try:
            entry = entry_from_search_result(self.search_results[selection[0]])
        except CardSourceError as e:
            messagebox.showerror("Error", str(e))
            return
        self._commit_cards([entry], self.store.generation, f"Added {entry.label}")

    def start_add_url(self):
        url = self.card_url.get()
        if not url.strip():
            messagebox.showerror("Error", "Please enter a valid URL")
            return
        self.status_text.set("Checking image...")
        self.run_in_background(self._url_worker, url, self.store.generation)

    def _url_worker(self, url, generation):
        try:
            entry = entry_from_url(url)
        except CardSourceError as e:
            self.queue_action("status", str(e))
            self.queue_action("error", f"{e}: {url}")
            return
        self.queue_action("cards", [entry], generation, "Card added successfully!", True)
        self.queue_action("clear_url")

    def upload_files(self):
        filenames = filedialog.askopenfilenames(title="Select Card Images",
                                                filetypes=[("Image files", "*.jpg *.jpeg *.png *.webp"),
                                                           ("All files", "*.*")])
        if not filenames:
            return
        result = entries_from_files(filenames)
        for path, error in result.failures:
            self.log_error(f"Could not read {os.path.basename(path)}: {error}")
        if result.entries:
            self._commit_cards(result.entries, self.store.generation,
                               f"Uploaded {len(result.entries)} card(s)")
            self.store.go_to_last_page()
            self.refresh_slots()

    def start_clipboard_import(self):
        try:
            text = self.clipboard_get()
        except tk.TclError:
            messagebox.showerror("Error", "Could not read clipboard.")
            return
        if not text.strip():
            messagebox.showerror("Error", "Clipboard is empty.")
            return
        self.status_text.set("Importing cards from clipboard...")
        self.run_in_background(self._import_worker, text, self.store.generation)

    def _import_worker(self, text, generation):
        try:
            result = import_decklist(text)
        except CardSourceError as e:
            self.queue_action("status", str(e))
            self.queue_action("error", str(e))
            return
        for line, reason in result.skipped:
            self.queue_action("error", f"Skipped '{line}': {reason}")
        self.queue_action("cards", result.entries, generation,
                          f"Imported {len(result.entries)} card(s) from clipboard!", True)

    def _commit_cards(self, entries, generation, message, jump_to_last=False):
        added = self.store.add_entries(entries, generation)
        if entries and not added:
            self.status_text.set("Collection was cleared; discarded late results.")
            return
        if jump_to_last:
            self.store.go_to_last_page()
        if message:
            self.status_text.set(message)
        self.refresh_slots()

    # Collection and slots

    def remove_slot(self, slot):
        entry = self.store.page_slots()[slot]
        if entry is None:
            return
        self.store.remove(entry.id)
        self._thumbnails.pop(entry.id, None)
        self.status_text.set("Card removed")
        self.refresh_slots()

    def clear_all(self):
        self.store.clear()
        self._thumbnails.clear()
        self._thumbnail_requests.clear()
        self.card_url.set("")
        self.search_query.set("")
        self._show_results([])
        self.status_text.set("Idle")
        self.refresh_slots()

    def change_page(self, delta):
        self.store.go_to_page(self.store.current_page + delta)
        self.refresh_slots()

    def refresh_slots(self):
        start = (self.store.current_page - 1) * CARDS_PER_PAGE
        for i, entry in enumerate(self.store.page_slots()):
            label = self.slot_labels[i]
            button = self.slot_buttons[i]
            if entry is None:
                label.config(image="", text=f"Slot {start + i + 1}")
                button.config(state="disabled")
                continue
            button.config(state="normal")
            if entry.id in self._thumbnails:
                thumbnail = self._thumbnails[entry.id]
                if thumbnail is None:
                    label.config(image="", text="Image not found")
                else:
                    label.config(image=thumbnail, text="")
            else:
                label.config(image="", text=entry.display_name or "Loading...")
                self._request_thumbnail(entry)
        self.page_text.set(f"Page {self.store.current_page} of {self.store.page_count} "
                           f"({len(self.store)} cards)")

    def _request_thumbnail(self, entry):
        if entry.id in self._thumbnail_requests:
            return
        self._thumbnail_requests.add(entry.id)
        self.run_in_background(self._thumbnail_worker, entry)

    def _thumbnail_worker(self, entry):
        result = load_image(entry.image_source, retries=1, delay=self.settings.retry_delay,
                            relays=self.settings.relays)
        if result.ok:
            image = result.image.copy()
            image.thumbnail(THUMBNAIL_SIZE)
            self.queue_action("thumbnail", entry, image)
        else:
            self.queue_action("thumbnail", entry, None)

    def _set_thumbnail(self, entry, image):
        if not any(e.id == entry.id for e in self.store):
            return
        self._thumbnails[entry.id] = ImageTk.PhotoImage(image) if image is not None else None
        self.refresh_slots()

    # PDF generation

    def browse_output(self):
        filename = filedialog.asksaveasfilename(title="Save PDF As",
                                                defaultextension=".pdf",
                                                filetypes=[("PDF files", "*.pdf")])
        if filename:
            self.output_pdf.set(filename)

    def start_generation(self):
        if not len(self.store):
            messagebox.showerror("Error", EMPTY_COLLECTION_MESSAGE)
            return

        self.generate_button.config(state="disabled")
        self.progress_bar["value"] = 0
        self.clear_error_text()
        self.run_in_background(self.generate_pdf_workflow, self.store.entries, self.output_pdf.get())

    def _report_state(self, state):
        self.queue_action("status", STATE_MESSAGES.get(state, state.value))
        if state in STATE_PROGRESS:
            self.queue_action("progress", STATE_PROGRESS[state])

    def generate_pdf_workflow(self, entries, output_pdf_file):
        """Worker thread for PDF generation."""
        try:
            report = generate_pdf(entries, output_pdf_file, self.settings, on_state=self._report_state)
        except EmptyCollectionError as e:
            self.queue_action("complete", False, str(e), None)
            return
        except Exception as e:
            logger.exception("Error generating PDF")
            self.queue_action("complete", False, f"Error generating the PDF: {e}", None)
            return

        msg = f"PDF generated: {output_pdf_file} ({report.page_count} page(s))"
        if report.failed_sources:
            msg += "\nSome card images could not be loaded:\n" + "\n".join(report.failed_sources)
            for source in report.failed_sources:
                self.queue_action("error", f"Image not found: {source}")
        self.queue_action("complete", True, msg, output_pdf_file)

    def _handle_completion(self, success, message, output_pdf_file):
        """Handle completion of the generation process."""
        self.generate_button.config(state="normal")
        if success:
            messagebox.showinfo("Success", message)
            webbrowser.open(Path(output_pdf_file).resolve().as_uri())
        else:
            messagebox.showerror("Error", message)

    def log_error(self, message):
        """Log an error message to the error text widget."""
        message = str(message)
        logger.warning(message)
        self.error_text.config(state="normal")
        self.error_text.insert(tk.END, message + "\n")
        self.error_text.config(state="disabled")

    def clear_error_text(self):
        self.error_text.config(state="normal")
        self.error_text.delete("1.0", tk.END)
        self.error_text.config(state="disabled")


def main(settings=None):
    app = ProxyPrinterGUI(settings)
    app.mainloop()
