import logging
import tkinter as tk
from tkinter import filedialog, messagebox, ttk

from sequentSolver import AXIOM, COUNTER_EXAMPLE, Falsifier, Solver
from sequentSyntax import DEFAULT_REGISTRY, Dumper, ParseError, export_latex, parse_sequent

logger = logging.getLogger(__name__)

MARKS = {AXIOM: "✔ ", COUNTER_EXAMPLE: "✘ "}


class SequentProverApp:
    def __init__(self, root, registry=None):
        self.root = root
        self.root.title("Sequent Calculus Prover")
        self.root.geometry("1100x750")

        # --- 1. Theming & Styles ---
        self.style = ttk.Style()
        self.style.theme_use("clam")

        # Define fonts
        self.main_font = ("Segoe UI", 11)
        self.mono_font = ("Consolas", 11)
        self.header_font = ("Segoe UI", 12, "bold")

        # Configure Widget Styles
        self.style.configure("TButton", font=self.main_font, padding=5)
        self.style.configure("TLabel", font=self.main_font)
        self.style.configure("Treeview", font=self.main_font, rowheight=25)
        self.style.configure("Treeview.Heading", font=self.header_font)

        # Logic State
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.solver = Solver()
        self.falsifier = Falsifier()
        self.dumper = Dumper(self.registry)
        self.root_node = None
        self.node_map = {}
        self.current_proof_node = None

        self._setup_ui()

    def _setup_ui(self):
        main_container = ttk.Frame(self.root, padding="15")
        main_container.pack(fill=tk.BOTH, expand=True)

        # --- SECTION: Header & Input ---
        header_frame = ttk.Frame(main_container)
        header_frame.pack(fill=tk.X, pady=(0, 15))

        ttk.Label(header_frame, text="Enter Sequent:", font=self.header_font).pack(side=tk.LEFT)

        self.input_var = tk.StringVar(value="p => q, p |- q")
        entry = ttk.Entry(header_frame, textvariable=self.input_var, font=self.mono_font)
        entry.pack(side=tk.LEFT, fill=tk.X, expand=True, padx=10)
        entry.bind("<Return>", lambda e: self.start_proof())

        ttk.Button(header_frame, text="▶ Prove", command=self.start_proof).pack(side=tk.LEFT, padx=5)
        ttk.Button(header_frame, text="✘ Falsify", command=self.falsify).pack(side=tk.LEFT, padx=5)
        ttk.Button(header_frame, text="📂 Load File", command=self.load_file).pack(side=tk.LEFT, padx=5)
        ttk.Button(header_frame, text="⬇ Export LaTeX", command=self.export_latex).pack(side=tk.RIGHT)

        # --- SECTION: Split Pane (Tree vs Details) ---
        self.paned = ttk.PanedWindow(main_container, orient=tk.HORIZONTAL)
        self.paned.pack(fill=tk.BOTH, expand=True)

        # -- LEFT PANE: Proof Tree --
        tree_frame = ttk.LabelFrame(self.paned, text=" 🌳 Proof Tree ", padding=10)
        self.paned.add(tree_frame, weight=2)

        tree_scroll = ttk.Scrollbar(tree_frame)
        tree_scroll.pack(side=tk.RIGHT, fill=tk.Y)

        self.tree = ttk.Treeview(tree_frame, selectmode="browse", yscrollcommand=tree_scroll.set)
        self.tree.pack(fill=tk.BOTH, expand=True)
        tree_scroll.config(command=self.tree.yview)

        self.tree.heading("#0", text="Sequent Structure", anchor=tk.W)
        self.tree.bind("<<TreeviewSelect>>", self.on_tree_select)

        # -- RIGHT PANE: Selected sequent & valuations --
        work_frame = ttk.Frame(self.paned)
        self.paned.add(work_frame, weight=1)

        lists_container = ttk.LabelFrame(work_frame, text=" 📝 Selected Sequent ", padding=10)
        lists_container.pack(fill=tk.BOTH, expand=True, padx=(10, 0))

        lists_container.columnconfigure(0, weight=1)
        lists_container.columnconfigure(2, weight=1)
        lists_container.rowconfigure(1, weight=1)

        ttk.Label(lists_container, text="Antecedent (LHS)", font=("Segoe UI", 10, "italic")).grid(
            row=0, column=0, sticky="w"
        )
        self.lhs_listbox = tk.Listbox(lists_container, font=self.main_font, borderwidth=0, highlightthickness=1)
        self.lhs_listbox.grid(row=1, column=0, sticky="nsew")

        ttk.Label(lists_container, text="⊢", font=("Times New Roman", 24)).grid(row=1, column=1, padx=10)

        ttk.Label(lists_container, text="Succedent (RHS)", font=("Segoe UI", 10, "italic")).grid(
            row=0, column=2, sticky="w"
        )
        self.rhs_listbox = tk.Listbox(lists_container, font=self.main_font, borderwidth=0, highlightthickness=1)
        self.rhs_listbox.grid(row=1, column=2, sticky="nsew")

        valuation_frame = ttk.LabelFrame(work_frame, text=" ✘ Falsifying Valuations ", padding=10)
        valuation_frame.pack(fill=tk.BOTH, expand=True, padx=(10, 0), pady=(10, 0))

        self.valuation_listbox = tk.Listbox(valuation_frame, font=self.mono_font, borderwidth=0)
        self.valuation_listbox.pack(fill=tk.BOTH, expand=True)

        # Status Bar
        self.status_var = tk.StringVar(value="Ready. Enter a sequent to begin.")
        status_bar = ttk.Label(
            self.root,
            textvariable=self.status_var,
            relief=tk.SUNKEN,
            anchor=tk.W,
            font=("Segoe UI", 9),
        )
        status_bar.pack(side=tk.BOTTOM, fill=tk.X)

    def read_input(self):
        try:
            return parse_sequent(self.input_var.get(), self.registry)
        except ParseError as e:
            messagebox.showerror("Error", f"Not a valid sequent ({e}). Ex: A & B -> B | C, D")
            return None

    def start_proof(self):
        sequent = self.read_input()
        if sequent is None:
            return None

        self.root_node = self.solver.prove(sequent)
        self.current_proof_node = self.root_node

        self.tree.delete(*self.tree.get_children())
        self.node_map = {}
        tree_id = self.insert_node("", self.root_node)
        self.tree.selection_set(tree_id)

        self.show_valuations(self.falsifier.falsify(sequent))
        if self.root_node.is_closed:
            self.status_var.set("Formula is valid: every branch closes with an axiom.")
        else:
            count = len(self.root_node.counter_examples())
            self.status_var.set(f"Formula is not valid: {count} counter-example branch(es).")
        return self.root_node

    def falsify(self):
        sequent = self.read_input()
        if sequent is None:
            return None

        valuations = self.falsifier.falsify(sequent)
        self.show_valuations(valuations)
        self.status_var.set(f"{len(valuations)} falsifying valuation(s).")
        return valuations

    def load_file(self, path=None):
        path = path or filedialog.askopenfilename(title="Load sequents")
        if not path:
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = [line.strip() for line in f if line.strip()]
        except OSError as e:
            logger.warning("cannot read %s: %s", path, e)
            messagebox.showerror("Error", f"File not found - {path}: {e}")
            return None

        trees = []
        for line in lines:
            self.input_var.set(line)
            trees.append(self.start_proof())
        return trees

    def insert_node(self, parent_id, node):
        txt = MARKS.get(node.status, "") if not node.children else ""
        txt += self.dumper.dump_sequent(node.sequent)
        if node.rule:
            txt += f"    [{node.rule}]"
        tree_id = self.tree.insert(parent_id, "end", text=txt, open=True)
        self.node_map[tree_id] = node
        for child in node.children:
            self.insert_node(tree_id, child)
        return tree_id

    def show_valuations(self, valuations):
        self.valuation_listbox.delete(0, tk.END)
        for i, (atom, value) in enumerate(valuations):
            self.valuation_listbox.insert(tk.END, f"  Valuation #{i}: {atom} -> {value}")

    def on_tree_select(self, event):
        sel = self.tree.selection()
        if not sel:
            return
        node = self.node_map.get(sel[0])
        if node:
            self.current_proof_node = node
            self.refresh_listboxes(node.sequent)

    def refresh_listboxes(self, sequent):
        self.lhs_listbox.delete(0, tk.END)
        self.rhs_listbox.delete(0, tk.END)
        for f in sequent.lhs:
            self.lhs_listbox.insert(tk.END, "  " + str(f))
        for f in sequent.rhs:
            self.rhs_listbox.insert(tk.END, "  " + str(f))

    def export_latex(self):
        if not self.root_node:
            return None

        latex_code = export_latex(self.root_node)

        # -- Export Dialog --
        win = tk.Toplevel(self.root)
        win.title("LaTeX Code Export")
        win.geometry("700x500")

        btn_frame = ttk.Frame(win, padding=10)
        btn_frame.pack(side=tk.BOTTOM, fill=tk.X)

        def copy_to_clipboard():
            self.root.clipboard_clear()
            self.root.clipboard_append(latex_code)
            self.root.update()  # Required to prevent clipboard loss
            messagebox.showinfo("Copied", "LaTeX code copied to clipboard!")

        ttk.Button(btn_frame, text="📋 Copy to Clipboard", command=copy_to_clipboard).pack(side=tk.RIGHT)
        ttk.Button(btn_frame, text="Close", command=win.destroy).pack(side=tk.RIGHT, padx=5)

        txt_frame = ttk.Frame(win)
        txt_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

        scroll = ttk.Scrollbar(txt_frame)
        scroll.pack(side=tk.RIGHT, fill=tk.Y)

        txt = tk.Text(txt_frame, font=("Consolas", 10), yscrollcommand=scroll.set, wrap=tk.NONE)
        txt.pack(fill=tk.BOTH, expand=True)
        scroll.config(command=txt.yview)

        txt.insert(tk.END, latex_code)
        return latex_code


def run(registry=None):
    root = tk.Tk()
    SequentProverApp(root, registry)
    root.mainloop()


if __name__ == "__main__":
    run()
