import logging
import tkinter as tk
from tkinter import messagebox, filedialog, ttk

import sv_ttk

from clinic_portal import backend
from clinic_portal import config
from clinic_portal import dashboards
from clinic_portal import login_backend
from clinic_portal import session
from clinic_portal.api_client import ApiError
from clinic_portal.formatting import format_date_time, format_vnd, day_name, table_lines
from clinic_portal.validators import password_strength

_logger = logging.getLogger(__name__)

# errors a screen shows to the user instead of crashing the Tk loop
UI_ERRORS = (ApiError, ValueError, PermissionError, NotImplementedError)


class HScrollFrame(tk.Frame):
    def __init__(self, master, height=130, **kwargs):
        super().__init__(master, **kwargs)
        self.canvas = tk.Canvas(self, height=height, highlightthickness=0)
        self.hbar = tk.Scrollbar(self, orient="horizontal", command=self.canvas.xview)
        self.canvas.configure(xscrollcommand=self.hbar.set)
        self.canvas.pack(side="top", fill="x", expand=False)
        self.hbar.pack(side="top", fill="x")
        self.inner = tk.Frame(self.canvas)
        self.inner.bind("<Configure>", lambda e: self.canvas.configure(scrollregion=self.canvas.bbox("all")))
        self.canvas.create_window((0, 0), window=self.inner, anchor="nw")


def _entry(parent, label, var, row, col, width=16, show=None):
    tk.Label(parent, text=label).grid(row=row, column=col, padx=4, sticky="e")
    tk.Entry(parent, textvariable=var, width=width, show=show).grid(row=row, column=col + 1, padx=4)


def _combo(parent, label, var, values, row, col, width=18):
    tk.Label(parent, text=label).grid(row=row, column=col, padx=4, sticky="e")
    cmb = ttk.Combobox(parent, textvariable=var, values=list(values), width=width, state="readonly")
    cmb.grid(row=row, column=col + 1, padx=4)
    return cmb


def _sep(parent, row, span=12):
    tk.Frame(parent, height=2, bd=1, relief="sunken").grid(row=row, column=0, columnspan=span, sticky="we", pady=6)


# ===================================================================
#                         LOGIN / REGISTER
# ===================================================================
class LoginWindow:
    """Sign-in screen. After mainloop returns, `self.role` is the dashboard to open (or None)."""

    def __init__(self):
        self.role = None
        self.root = tk.Tk()
        self.root.title("Clinic Portal - Sign in")
        self.root.geometry("460x360")

        tk.Label(self.root, text="Clinic Portal", font=("Georgia", 24, "bold"), fg="#3498db").pack(pady=20)

        frm = tk.Frame(self.root)
        frm.pack(pady=6)
        self.username = tk.StringVar()
        self.password = tk.StringVar()
        _entry(frm, "Username", self.username, 0, 0, width=28)
        _entry(frm, "Password", self.password, 1, 0, width=28, show="*")

        self.error = tk.Label(self.root, text="", fg="#e74c3c")
        self.error.pack()

        tk.Button(self.root, text="Sign in", width=15, height=2, command=self.do_login).pack(pady=8)
        links = tk.Frame(self.root)
        links.pack()
        tk.Button(links, text="Create account", command=self.open_register).pack(side="left", padx=6)
        tk.Button(links, text="Forgot password?", command=self.open_forgot_password).pack(side="left", padx=6)
        self.root.bind("<Return>", lambda e: self.do_login())

        sv_ttk.use_dark_theme()
        self.root.mainloop()

    def do_login(self):
        self.error.config(text="")
        try:
            self.role = login_backend.login(self.username.get(), self.password.get())
        except UI_ERRORS as e:
            self.error.config(text=str(e))
            return
        self.root.destroy()

    def open_register(self):
        win = tk.Toplevel(self.root)
        win.title("Create account")
        win.geometry("520x360")
        frm = tk.Frame(win)
        frm.pack(pady=10, padx=10)

        fields = [("ho_ten", "Full name", None), ("ten_dang_nhap", "Username", None),
                  ("mat_khau", "Password", "*"), ("confirm_password", "Confirm password", "*"),
                  ("email", "Email (optional)", None), ("so_dien_thoai", "Phone (optional)", None)]
        vars_ = {}
        for i, (key, label, show) in enumerate(fields):
            vars_[key] = tk.StringVar()
            _entry(frm, label, vars_[key], i, 0, width=28, show=show)

        def do_register():
            try:
                login_backend.register({k: v.get() for k, v in vars_.items()})
            except UI_ERRORS as e:
                messagebox.showerror("Registration failed", str(e), parent=win)
                return
            messagebox.showinfo("Account created", "Registration successful. Please sign in.", parent=win)
            self.username.set(vars_["ten_dang_nhap"].get().strip())
            win.destroy()

        tk.Button(win, text="Register", width=12, command=do_register).pack(pady=12)

    def open_forgot_password(self):
        win = tk.Toplevel(self.root)
        win.title("Reset password")
        win.geometry("520x300")
        frm = tk.Frame(win)
        frm.pack(pady=10, padx=10)

        email = tk.StringVar(); code = tk.StringVar(); new = tk.StringVar(); confirm = tk.StringVar()
        _entry(frm, "Email", email, 0, 0, width=28)
        status = tk.Label(win, text="Step 1: request a reset code", fg="#3498db")
        status.pack()

        step2 = tk.Frame(win)
        _entry(step2, "Reset code", code, 0, 0, width=28)
        _entry(step2, "New password", new, 1, 0, width=28, show="*")
        _entry(step2, "Confirm password", confirm, 2, 0, width=28, show="*")

        def send_code():
            try:
                login_backend.forgot_password(email.get())
            except UI_ERRORS as e:
                messagebox.showerror("Error", str(e), parent=win)
                return
            status.config(text=f"Step 2: enter the code sent to {email.get().strip()}")
            step2.pack(pady=6)

        def do_reset():
            try:
                login_backend.reset_password(email.get().strip(), code.get(), new.get(), confirm.get())
            except UI_ERRORS as e:
                messagebox.showerror("Error", str(e), parent=win)
                return
            messagebox.showinfo("Done", "Password reset successfully. Please sign in.", parent=win)
            win.destroy()

        tk.Button(frm, text="Send code", command=send_code).grid(row=0, column=2, padx=6)
        tk.Button(step2, text="Reset password", command=do_reset).grid(row=3, column=1, pady=8)


# ===================================================================
#                          MAIN INTERFACE
# ===================================================================
class MainInterface:
    ROLE_BUTTONS = {
        "customer": [("Book", "open_booking"), ("My Appointments", "open_my_appointments"),
                     ("Lab Results", "open_lab_results"), ("Medical Records", "open_my_records"),
                     ("Profile", "open_profile"), ("Change Password", "open_change_password")],
        "doctor": [("Overview", "open_doctor_overview"), ("Medical Records", "open_medical_records"),
                   ("Prescriptions", "open_prescriptions"), ("Lab Tests", "open_lab_tests"),
                   ("Schedule", "open_schedule")],
        "receptionist": [("Customers & Booking", "open_customers"), ("Appointments", "open_appointments"),
                         ("Payments", "open_payments")],
        "accountant": [("Payroll", "open_payroll")],
        "manager": [("Clinic Operations", "open_clinic_operations")],
        "executive": [("Performance", "open_performance")],
    }

    def __init__(self, role: str):
        session.require_role(role)
        self.role = role
        self.logged_out = False
        self.root = tk.Tk()
        self.root.title("Clinic Portal")
        self.root.geometry("900x560")

        nav = tk.Frame(self.root)
        nav.pack(fill="x", padx=10, pady=8)
        tk.Label(nav, text="Clinic Portal", font=("Georgia", 20, "bold"), fg="#3498db").pack(side="left")
        tk.Button(nav, text="Logout", command=self.logout).pack(side="right", padx=4)
        tk.Button(nav, text="Account", command=self.open_account_window).pack(side="right", padx=4)
        tk.Label(nav, text=f"{session.get_email()}  ({session.role_display_name(role)})").pack(side="right", padx=10)

        btns = tk.Frame(self.root)
        btns.pack(pady=30)
        row_val = 0
        col_val = 0
        for text, handler in self.ROLE_BUTTONS.get(role, []):
            tk.Button(btns, text=text, width=18, height=2, font=("Georgia", 13),
                      command=getattr(self, handler)).grid(row=row_val, column=col_val, padx=10, pady=10)
            col_val += 1
            if col_val > 2:
                col_val = 0
                row_val += 1

        sv_ttk.use_dark_theme()
        self.root.mainloop()

    def logout(self):
        login_backend.logout()
        self.logged_out = True
        self.root.destroy()

    # utilities
    def _make_page(self, title: str, width=1100, height=660, top_height=170):
        win = tk.Toplevel(self.root)
        win.title(title)
        win.geometry(f"{width}x{height}")

        top_wrap = HScrollFrame(win, height=top_height)
        top_wrap.pack(fill="x", padx=8, pady=6)
        top = top_wrap.inner

        banner = tk.Label(win, text="", fg="#e74c3c", anchor="w")
        banner.pack(fill="x", padx=8)
        win.banner = banner

        mid = tk.Frame(win)
        mid.pack(fill="both", expand=True, padx=8, pady=6)

        lb = tk.Listbox(mid, font=("Consolas", 10))
        ysb = tk.Scrollbar(mid, orient="vertical", command=lb.yview)
        xsb = tk.Scrollbar(mid, orient="horizontal", command=lb.xview)

        lb.configure(yscrollcommand=ysb.set, xscrollcommand=xsb.set)

        ysb.pack(side="right", fill="y")
        xsb.pack(side="bottom", fill="x")
        lb.pack(side="left", fill="both", expand=True)

        return win, top, lb

    def _fill_with_headers(self, lb, headers, rows):
        lb.delete(0, tk.END)
        lb.xview_moveto(0.0)
        lb.yview_moveto(0.0)
        for line in table_lines(headers, rows):
            lb.insert(tk.END, line)
        lb.update_idletasks()

    def _load(self, win, lb, headers, rows_fn, what="data"):
        """Fill the table; on failure keep it empty and show the banner."""
        win.banner.config(text="")
        try:
            rows = rows_fn()
        except UI_ERRORS as e:
            _logger.warning("Failed to load %s: %s", what, e)
            win.banner.config(text=f"Failed to load {what}: {e}")
            rows = []
        self._fill_with_headers(lb, headers, rows)

    def _add(self, fn, lb, refresh_fn, headers, done=None):
        try:
            fn()
            self._fill_with_headers(lb, headers, refresh_fn())
        except UI_ERRORS as e:
            messagebox.showerror("Error", str(e))
            return
        if done:
            messagebox.showinfo("Saved", done)

    def _safe(self, fn, default=None, what="data"):
        try:
            return fn()
        except UI_ERRORS as e:
            _logger.warning("Failed to load %s: %s", what, e)
            return default

    # ------------------ Account ------------------
    def open_account_window(self):
        win = tk.Toplevel(self.root)
        win.title("My Account")
        win.geometry("420x200")
        tk.Label(win, text=f"Logged in as: {session.get_email()}", font=("Arial", 12, "bold")).pack(pady=10)
        tk.Label(win, text=f"Role: {session.role_display_name(self.role)}").pack()
        row = tk.Frame(win)
        row.pack(pady=16)
        tk.Button(row, text="Profile", width=14, command=self.open_profile).pack(side="left", padx=6)
        tk.Button(row, text="Change Password", width=16, command=self.open_change_password).pack(side="left", padx=6)

    def open_profile(self):
        win = tk.Toplevel(self.root)
        win.title("Profile")
        win.geometry("520x380")
        frm = tk.Frame(win)
        frm.pack(pady=10, padx=10)

        try:
            profile = login_backend.load_profile()
        except UI_ERRORS as e:
            messagebox.showerror("Error", f"Failed to load profile: {e}", parent=win)
            win.destroy()
            return

        labels = {"ho_ten": "Full name", "email": "Email", "so_dien_thoai": "Phone",
                  "ngay_sinh": "Birth date (YYYY-MM-DD)", "gioi_tinh": "Gender", "dia_chi": "Address",
                  "ma_bao_hiem": "Insurance no."}
        tk.Label(frm, text="Username").grid(row=0, column=0, padx=4, sticky="e")
        tk.Label(frm, text=profile["ten_dang_nhap"]).grid(row=0, column=1, padx=4, sticky="w")
        vars_ = {}
        for i, key in enumerate(login_backend.PROFILE_FIELDS, start=1):
            vars_[key] = tk.StringVar(value=profile[key])
            if key == "gioi_tinh":
                _combo(frm, labels[key], vars_[key], login_backend.GENDERS, i, 0, width=26)
            else:
                _entry(frm, labels[key], vars_[key], i, 0, width=28)

        def do_save():
            try:
                login_backend.save_profile({k: v.get() for k, v in vars_.items()})
            except UI_ERRORS as e:
                messagebox.showerror("Error", str(e), parent=win)
                return
            messagebox.showinfo("Saved", "Profile updated successfully", parent=win)

        tk.Button(win, text="Save", width=12, command=do_save).pack(pady=10)

    def open_change_password(self):
        win = tk.Toplevel(self.root)
        win.title("Change Password")
        win.geometry("480x320")
        frm = tk.Frame(win)
        frm.pack(pady=10, padx=10)

        current = tk.StringVar(); new = tk.StringVar(); confirm = tk.StringVar()
        _entry(frm, "Current password", current, 0, 0, width=26, show="*")
        _entry(frm, "New password", new, 1, 0, width=26, show="*")
        _entry(frm, "Confirm new password", confirm, 2, 0, width=26, show="*")

        checks = tk.Label(win, text="", justify="left")
        checks.pack(pady=6)
        rules = [("min_length", "At least 8 characters"), ("has_upper", "One uppercase letter"),
                 ("has_lower", "One lowercase letter"), ("has_digit", "One number"),
                 ("has_special", "One special character")]

        def refresh(*_):
            flags = password_strength(new.get())
            checks.config(text="\n".join(f"[{'x' if flags[k] else ' '}] {text}" for k, text in rules))

        new.trace_add("write", refresh)
        refresh()

        def do_change():
            try:
                login_backend.change_password(current.get(), new.get(), confirm.get())
            except UI_ERRORS as e:
                messagebox.showerror("Error", str(e), parent=win)
                return
            messagebox.showinfo("Saved", "Password changed successfully", parent=win)
            win.destroy()

        tk.Button(win, text="Change password", command=do_change).pack(pady=8)

    # ------------------ Customer: booking ------------------
    def open_booking(self):
        win, top, lb = self._make_page("Book Appointment")
        headers = ["doctor_id", "name", "specialty", "visited_before"]

        clinics = backend.clinics_or_default()
        clinic_by_name = {f"{c.get('ten_phong_kham')} ({c.get('ma_phong_kham')})": c.get("ma_phong_kham")
                          for c in clinics}
        specialties = ["all"] + self._safe(backend.specialty_view, [], "specialties")
        doctor_by_name = {}

        clinic = tk.StringVar(); specialty = tk.StringVar(value="all"); doctor = tk.StringVar()
        day = tk.StringVar(); time = tk.StringVar(); notes = tk.StringVar()

        _combo(top, "Clinic", clinic, clinic_by_name, 0, 0, width=28)
        _combo(top, "Specialty", specialty, specialties, 0, 2)
        doctor_cmb = _combo(top, "Doctor", doctor, [], 0, 4, width=26)
        _entry(top, "Date (YYYY-MM-DD)", day, 1, 0)
        time_cmb = _combo(top, "Time", time, [], 1, 2, width=8)
        _entry(top, "Notes", notes, 1, 4, width=28)

        def load_doctors(*_):
            cid = clinic_by_name.get(clinic.get())
            doctor_by_name.clear()
            rows = []
            try:
                groups = backend.load_doctors(cid, specialty.get())
            except UI_ERRORS as e:
                win.banner.config(text=f"Failed to load doctors: {e}")
                groups = {"previously_visited": [], "other_doctors": []}
            for visited, group in ((True, groups["previously_visited"]), (False, groups["other_doctors"])):
                for d in group:
                    did = backend.doctor_id(d)
                    doctor_by_name[f"{d.get('ho_ten')} ({did})"] = did
                    rows.append((did, d.get("ho_ten"), d.get("chuyen_khoa"), "yes" if visited else ""))
            doctor_cmb.configure(values=list(doctor_by_name) or [backend.NO_DOCTORS])
            doctor.set("")
            self._fill_with_headers(lb, headers, rows)

        def load_slots(*_):
            try:
                slots = backend.available_slots(clinic_by_name.get(clinic.get()),
                                                doctor_by_name.get(doctor.get(), doctor.get()), day.get().strip())
            except UI_ERRORS as e:
                win.banner.config(text=f"Failed to load time slots: {e}")
                slots = []
            time_cmb.configure(values=slots)
            time.set("")
            if not slots:
                win.banner.config(text="No available time slots for this day")

        def do_book():
            try:
                backend.book_appointment(clinic_by_name.get(clinic.get()),
                                         doctor_by_name.get(doctor.get(), doctor.get()),
                                         day.get().strip(), time.get(), notes.get().strip())
            except UI_ERRORS as e:
                messagebox.showerror("Booking failed", str(e), parent=win)
                return
            messagebox.showinfo("Booked", "Appointment booked successfully", parent=win)
            load_slots()

        clinic.trace_add("write", load_doctors)
        specialty.trace_add("write", load_doctors)
        tk.Button(top, text="Show times", command=load_slots).grid(row=1, column=6, padx=6)
        tk.Button(top, text="Book", command=do_book).grid(row=1, column=7, padx=6)

        self._fill_with_headers(lb, headers, [])

    # ------------------ Customer: appointments ------------------
    def open_my_appointments(self):
        win, top, lb = self._make_page("My Appointments")
        headers = ["when", "id", "date", "time", "day", "doctor", "clinic", "status", "notes"]

        def rows():
            upcoming, past = backend.split_upcoming_past(backend.appointment_view())
            out = []
            for label, group in (("upcoming", upcoming), ("past", past)):
                for a in group:
                    d, t = format_date_time(a.get("ngay_gio_kham"))
                    out.append((label, a.get("ma_lich_kham"), d, t, day_name(a.get("ngay_gio_kham")),
                                a.get("ten_bac_si"), a.get("ten_phong_kham"), a.get("trang_thai"),
                                a.get("ghi_chu") or ""))
            return out

        cancel_id = tk.StringVar(); reason = tk.StringVar()
        _entry(top, "Cancel appointment id", cancel_id, 0, 0)
        _entry(top, "Reason", reason, 0, 2, width=30)
        tk.Button(top, text="Cancel appointment",
                  command=lambda: self._add(lambda: backend.cancel_appointment(cancel_id.get().strip(), reason.get()),
                                            lb, rows, headers, "Appointment cancelled")
                  ).grid(row=0, column=4, padx=6)

        _sep(top, 1)
        rs_id = tk.StringVar(); rs_date = tk.StringVar(); rs_time = tk.StringVar(); rs_reason = tk.StringVar()
        _entry(top, "Reschedule id", rs_id, 2, 0)
        _entry(top, "New date", rs_date, 2, 2)
        _combo(top, "New time", rs_time, backend.RESCHEDULE_TIMES, 2, 4, width=8)
        _entry(top, "Reason", rs_reason, 2, 6, width=24)
        tk.Button(top, text="Reschedule",
                  command=lambda: self._add(
                      lambda: backend.reschedule_appointment(rs_id.get().strip(), rs_date.get().strip(),
                                                             rs_time.get(), rs_reason.get().strip()),
                      lb, rows, headers, "Appointment rescheduled")
                  ).grid(row=2, column=8, padx=6)
        tk.Button(top, text="Refresh", command=lambda: self._load(win, lb, headers, rows, "appointments")
                  ).grid(row=0, column=5, padx=6)

        self._load(win, lb, headers, rows, "appointments")

    # ------------------ Customer: lab results / records ------------------
    def open_lab_results(self):
        win, top, lb = self._make_page("Lab Results")
        headers = ["lab_test_id", "record_id", "customer", "type", "date", "status", "result"]
        cache = {"tests": []}

        def fetch():
            cache["tests"] = backend.lab_test_view()
            return backend.lab_test_rows(cache["tests"])

        term = tk.StringVar(); detail_id = tk.StringVar()
        _entry(top, "Search", term, 0, 0, width=28)
        tk.Button(top, text="Search", command=lambda: self._fill_with_headers(
            lb, headers, backend.lab_test_rows(backend.filter_lab_results(cache["tests"], term.get())))
        ).grid(row=0, column=2, padx=6)

        def show_detail():
            try:
                t = backend.lab_test_detail(detail_id.get().strip())
            except UI_ERRORS as e:
                messagebox.showerror("Error", str(e), parent=win)
                return
            messagebox.showinfo(
                f"Lab test {t.get('ma_xet_nghiem')}",
                f"Type: {t.get('loai_xet_nghiem')}\nDate: {t.get('ngay_xet_nghiem')}\n"
                f"Status: {t.get('status')}\n\nResult:\n{t.get('ket_qua') or 'Pending'}\n\n"
                f"Notes: {t.get('ghi_chu') or ''}", parent=win)

        _entry(top, "Details for id", detail_id, 1, 0)
        tk.Button(top, text="View", command=show_detail).grid(row=1, column=2, padx=6)

        self._load(win, lb, headers, fetch, "lab results")

    def open_my_records(self):
        win, top, lb = self._make_page("Medical Records")
        headers = ["record_id", "customer", "visit_date", "symptoms", "diagnosis", "icd10", "follow_up"]
        tk.Button(top, text="Refresh", command=lambda: self._load(
            win, lb, headers, lambda: backend.record_rows(backend.record_view(session.get_user_id())),
            "medical records")).grid(row=0, column=0, padx=6)
        self._load(win, lb, headers, lambda: backend.record_rows(backend.record_view(session.get_user_id())),
                   "medical records")

    # ------------------ Doctor: overview ------------------
    def open_doctor_overview(self):
        win, top, lb = self._make_page("Doctor Overview")
        sched_headers = ["time", "patient", "type", "status"]
        rec_headers = ["id", "name", "last_visit", "diagnosis", "prescription", "notes"]

        if dashboards.has_schedule_conflicts():
            tk.Label(top, text="Urgent appointment in today's schedule", fg="#e74c3c").grid(
                row=0, column=0, columnspan=4, sticky="w")
        tk.Button(top, text="Today's schedule", command=lambda: self._fill_with_headers(
            lb, sched_headers, [(s["time"], s["patient"], s["type"], s["status"]) for s in dashboards.TODAY_SCHEDULE])
        ).grid(row=1, column=0, padx=6)

        term = tk.StringVar()
        _entry(top, "Search patients", term, 1, 1, width=24)

        def search():
            found = dashboards.search_patient_records(term.get())
            self._fill_with_headers(lb, rec_headers, [
                (r["id"], r["name"], r["last_visit"], r["diagnosis"], r["prescription"], r["notes"]) for r in found])

        tk.Button(top, text="Search", command=search).grid(row=1, column=3, padx=6)
        self._fill_with_headers(
            lb, sched_headers, [(s["time"], s["patient"], s["type"], s["status"]) for s in dashboards.TODAY_SCHEDULE])

    # ------------------ Doctor: medical records ------------------
    def open_medical_records(self):
        win, top, lb = self._make_page("Medical Records", top_height=200)
        headers = ["record_id", "customer", "visit_date", "symptoms", "diagnosis", "icd10", "follow_up"]
        cache = {"records": []}

        def fetch():
            cache["records"] = backend.record_view()
            return backend.record_rows(cache["records"])

        patients = backend.patients_from_appointments(self._safe(backend.appointment_view, [], "appointments"))
        patient_by_name = {f"{p['ten_khach_hang']} ({p['ma_customer']})": p["ma_customer"] for p in patients}
        form = {k: tk.StringVar(value=v) for k, v in backend.new_record_form().items()}
        editing = tk.StringVar()
        patient = tk.StringVar()
        diag = tk.StringVar()

        _combo(top, "Patient", patient, patient_by_name, 0, 0, width=26)
        _entry(top, "Visit date", form["ngay_kham"], 0, 2, width=12)
        _entry(top, "Follow-up", form["ngay_tai_kham"], 0, 4, width=12)
        _entry(top, "Symptoms", form["trieu_chung"], 1, 0, width=28)
        _entry(top, "Diagnosis", form["chan_doan"], 1, 2, width=28)
        _entry(top, "ICD-10", form["ma_icd10"], 1, 4, width=10)
        _combo(top, "Common", diag, [f"{d['code']} {d['name']}" for d in backend.COMMON_DIAGNOSES], 1, 6, width=30)
        _entry(top, "Treatment", form["huong_dan_dieu_tri"], 2, 0, width=40)

        def pick_diagnosis(*_):
            values = {k: v.get() for k, v in form.items()}
            backend.apply_diagnosis(values, diag.get().split(" ", 1)[0])
            form["chan_doan"].set(values["chan_doan"])
            form["ma_icd10"].set(values["ma_icd10"])

        diag.trace_add("write", pick_diagnosis)

        def reset():
            editing.set("")
            patient.set("")
            for k, v in backend.new_record_form().items():
                form[k].set(v)

        def load_for_edit():
            rid = editing.get().strip()
            rec = next((r for r in cache["records"] if r.get("ma_ho_so") == rid), None)
            if rec is None:
                messagebox.showerror("Error", f"No record {rid}", parent=win)
                return
            for k, v in backend.record_form(rec).items():
                form[k].set(v)
            patient_by_name.setdefault(f"{rec.get('ten_khach_hang')} ({rec.get('ma_customer')})", rec.get("ma_customer"))
            patient.set(f"{rec.get('ten_khach_hang')} ({rec.get('ma_customer')})")

        def save():
            values = {k: v.get().strip() for k, v in form.items()}
            values["ma_customer"] = patient_by_name.get(patient.get(), "")
            backend.save_record(values, editing.get().strip() or None, session.get_user_id())
            reset()

        _sep(top, 3)
        _entry(top, "Edit record id", editing, 4, 0)
        tk.Button(top, text="Load", command=load_for_edit).grid(row=4, column=2, padx=6)
        tk.Button(top, text="New", command=reset).grid(row=4, column=3, padx=6)
        tk.Button(top, text="Save", command=lambda: self._add(save, lb, fetch, headers, "Medical record saved")
                  ).grid(row=4, column=4, padx=6)

        self._load(win, lb, headers, fetch, "medical records")

    # ------------------ Doctor: prescriptions ------------------
    def open_prescriptions(self):
        win, top, lb = self._make_page("Prescriptions", top_height=200)
        headers = ["prescription_id", "record_id", "customer", "date", "medications", "notes"]
        cache = {"items": []}
        draft = backend.new_prescription_draft()

        def fetch():
            cache["items"] = backend.prescription_view()
            return backend.prescription_rows(cache["items"])

        records = self._safe(backend.record_view, [], "medical records")
        record_by_name = {f"{p['ho_ten']} ({p['ma_ho_so']})": p["ma_ho_so"] for p in backend.patients_from_records(records)}
        meds_by_name = {}

        record = tk.StringVar(); notes = tk.StringVar(); editing = tk.StringVar()
        query = tk.StringVar(); med = tk.StringVar(); qty = tk.StringVar(value="1"); usage = tk.StringVar()
        term = tk.StringVar()

        _combo(top, "Medical record", record, record_by_name, 0, 0, width=28)
        _entry(top, "Notes", notes, 0, 2, width=30)
        _entry(top, "Find medication", query, 1, 0)
        med_cmb = _combo(top, "Medication", med, [], 1, 3, width=24)
        _entry(top, "Qty", qty, 2, 0, width=5)
        tk.Label(top, text="Usage").grid(row=2, column=2, padx=4, sticky="e")
        ttk.Combobox(top, textvariable=usage, values=list(backend.COMMON_DOSAGES), width=20).grid(row=2, column=3, padx=4)
        draft_lbl = tk.Label(top, text="Draft: (empty)", anchor="w")
        draft_lbl.grid(row=3, column=0, columnspan=8, sticky="w")

        def show_draft():
            lines = [f"{m['ten_thuoc']} ({m['ma_thuoc']}) x{m['so_luong']} {m['cach_dung']}" for m in draft["medications"]]
            draft_lbl.config(text="Draft: " + ("; ".join(lines) or "(empty)"))

        def find_meds():
            meds_by_name.clear()
            for m in self._safe(lambda: backend.medication_view(query.get().strip()), [], "medications"):
                meds_by_name[f"{m.get('ten_thuoc')} ({m.get('ma_thuoc')})"] = m
            med_cmb.configure(values=list(meds_by_name))

        def add_line():
            m = meds_by_name.get(med.get(), {})
            try:
                backend.add_medication(draft, {"ma_thuoc": m.get("ma_thuoc"), "ten_thuoc": m.get("ten_thuoc"),
                                               "so_luong": qty.get(), "cach_dung": usage.get()})
            except UI_ERRORS as e:
                messagebox.showerror("Error", str(e), parent=win)
                return
            show_draft()

        def remove_line():
            m = meds_by_name.get(med.get(), {})
            backend.remove_medication(draft, m.get("ma_thuoc"))
            show_draft()

        def load_for_edit():
            pid = editing.get().strip()
            p = next((x for x in cache["items"] if x.get("ma_don_thuoc") == pid), None)
            if p is None:
                messagebox.showerror("Error", f"No prescription {pid}", parent=win)
                return
            draft.update(backend.prescription_draft(p))
            record_by_name.setdefault(f"{p.get('ten_khach_hang')} ({draft['ma_ho_so']})", draft["ma_ho_so"])
            record.set(f"{p.get('ten_khach_hang')} ({draft['ma_ho_so']})")
            notes.set(draft["ghi_chu"])
            show_draft()

        def save():
            draft["ma_ho_so"] = record_by_name.get(record.get(), "")
            draft["ghi_chu"] = notes.get().strip()
            backend.save_prescription(draft, editing.get().strip() or None)
            draft.update(backend.new_prescription_draft())
            editing.set("")
            show_draft()

        tk.Button(top, text="Find", command=find_meds).grid(row=1, column=2, padx=6)
        tk.Button(top, text="Add line", command=add_line).grid(row=2, column=4, padx=6)
        tk.Button(top, text="Remove line", command=remove_line).grid(row=2, column=5, padx=6)
        _sep(top, 4)
        _entry(top, "Edit prescription id", editing, 5, 0)
        tk.Button(top, text="Load", command=load_for_edit).grid(row=5, column=2, padx=6)
        tk.Button(top, text="Save", command=lambda: self._add(save, lb, fetch, headers, "Prescription saved")
                  ).grid(row=5, column=3, padx=6)
        _entry(top, "Search", term, 5, 4)
        tk.Button(top, text="Search", command=lambda: self._fill_with_headers(
            lb, headers, backend.prescription_rows(backend.filter_prescriptions(cache["items"], term.get())))
        ).grid(row=5, column=6, padx=6)

        self._load(win, lb, headers, fetch, "prescriptions")

    # ------------------ Doctor: lab tests ------------------
    def open_lab_tests(self):
        win, top, lb = self._make_page("Lab Tests", top_height=200)
        headers = ["lab_test_id", "record_id", "customer", "type", "date", "status", "result"]
        cache = {"tests": []}
        status = tk.StringVar(value="all"); term = tk.StringVar()

        def fetch():
            cache["tests"] = backend.lab_test_view(status=status.get())
            return backend.lab_test_rows(cache["tests"])

        form = {k: tk.StringVar(value=v) for k, v in backend.new_lab_test_form().items()}
        editing = tk.StringVar(); del_id = tk.StringVar()

        _combo(top, "Status", status, ["all"] + list(backend.LAB_TEST_STATUSES), 0, 0, width=12)
        tk.Button(top, text="Filter", command=lambda: self._load(win, lb, headers, fetch, "lab tests")
                  ).grid(row=0, column=2, padx=6)
        _entry(top, "Search", term, 0, 3)
        tk.Button(top, text="Search", command=lambda: self._fill_with_headers(
            lb, headers, backend.lab_test_rows(backend.filter_lab_tests(cache["tests"], term.get())))
        ).grid(row=0, column=5, padx=6)

        _sep(top, 1)
        _entry(top, "Record id", form["ma_ho_so"], 2, 0)
        _combo(top, "Test type", form["loai_xet_nghiem"], backend.lab_test_types(), 2, 2, width=24)
        _entry(top, "Date", form["ngay_xet_nghiem"], 2, 4, width=12)
        _entry(top, "Result", form["ket_qua"], 3, 0, width=30)
        _entry(top, "Notes", form["ghi_chu"], 3, 2, width=26)

        def load_for_edit():
            tid = editing.get().strip()
            t = next((x for x in cache["tests"] if x.get("ma_xet_nghiem") == tid), None)
            if t is None:
                messagebox.showerror("Error", f"No lab test {tid}", parent=win)
                return
            for k, v in backend.lab_test_form(t).items():
                form[k].set(v)

        def save():
            backend.save_lab_test({k: v.get().strip() for k, v in form.items()}, editing.get().strip() or None)
            editing.set("")
            for k, v in backend.new_lab_test_form().items():
                form[k].set(v)

        _entry(top, "Edit lab test id", editing, 4, 0)
        tk.Button(top, text="Load", command=load_for_edit).grid(row=4, column=2, padx=6)
        tk.Button(top, text="Save", command=lambda: self._add(save, lb, fetch, headers, "Lab test saved")
                  ).grid(row=4, column=3, padx=6)

        def delete():
            if messagebox.askyesno("Delete", f"Delete lab test {del_id.get().strip()}?", parent=win):
                self._add(lambda: backend.delete_lab_test(del_id.get().strip()), lb, fetch, headers)

        _entry(top, "Delete id", del_id, 4, 4)
        tk.Button(top, text="Delete", command=delete).grid(row=4, column=6, padx=6)

        self._load(win, lb, headers, fetch, "lab tests")

    # ------------------ Doctor: schedule ------------------
    def open_schedule(self):
        win, top, lb = self._make_page("Work Schedule", top_height=200)
        headers = ["schedule_id", "date", "day", "clinic", "start", "end", "status"]
        me = session.get_user_id()
        date_from = tk.StringVar(value=backend.week_start()); date_to = tk.StringVar()

        def fetch():
            schedules = backend.schedule_view(me, None, date_from.get().strip(), date_to.get().strip())
            rows = []
            for day, items in backend.group_by_date(schedules).items():
                for s in items:
                    rows.append((s.get("ma_lich_lam_viec"), day, day_name(day), s.get("ma_phong_kham"),
                                 s.get("gio_bat_dau"), s.get("gio_ket_thuc"), s.get("status")))
            return rows

        _entry(top, "From", date_from, 0, 0, width=12)
        _entry(top, "To", date_to, 0, 2, width=12)
        tk.Button(top, text="Show", command=lambda: self._load(win, lb, headers, fetch, "schedules")
                  ).grid(row=0, column=4, padx=6)

        clinics = backend.clinics_or_default()
        form = {k: tk.StringVar(value=v) for k, v in backend.new_schedule_form(me or "").items()}
        editing = tk.StringVar(); del_id = tk.StringVar()
        _sep(top, 1)
        _combo(top, "Clinic", form["ma_phong_kham"], [c.get("ma_phong_kham") for c in clinics], 2, 0, width=10)
        _entry(top, "Date", form["ngay_lam_viec"], 2, 2, width=12)
        _combo(top, "Start", form["gio_bat_dau"], backend.TIME_SLOT_OPTIONS, 2, 4, width=7)
        _combo(top, "End", form["gio_ket_thuc"], backend.TIME_SLOT_OPTIONS, 2, 6, width=7)
        _combo(top, "Status", form["status"], backend.SCHEDULE_STATUSES, 2, 8, width=10)

        def load_for_edit():
            try:
                s = backend.schedule_detail(editing.get().strip())
            except UI_ERRORS as e:
                messagebox.showerror("Error", str(e), parent=win)
                return
            for k, v in backend.schedule_form(s).items():
                form[k].set(v)

        def save():
            backend.save_schedule({k: v.get().strip() for k, v in form.items()}, editing.get().strip() or None)
            editing.set("")

        def delete():
            if messagebox.askyesno("Delete", f"Delete schedule {del_id.get().strip()}?", parent=win):
                self._add(lambda: backend.delete_schedule(del_id.get().strip()), lb, fetch, headers)

        _entry(top, "Edit schedule id", editing, 3, 0)
        tk.Button(top, text="Load", command=load_for_edit).grid(row=3, column=2, padx=6)
        tk.Button(top, text="Save", command=lambda: self._add(save, lb, fetch, headers, "Schedule saved")
                  ).grid(row=3, column=3, padx=6)
        _entry(top, "Delete id", del_id, 3, 4)
        tk.Button(top, text="Delete", command=delete).grid(row=3, column=6, padx=6)

        self._load(win, lb, headers, fetch, "schedules")

    # ------------------ Receptionist: customers & booking ------------------
    def open_customers(self):
        win, top, lb = self._make_page("Customers & Booking", top_height=230)
        headers = ["user_id", "name", "username", "phone", "email", "birth_date", "insurance"]
        cache = {"customers": []}
        search = tk.StringVar()

        def fetch():
            cache["customers"] = backend.customer_view()
            return backend.customer_rows(backend.filter_customers(cache["customers"], search.get()))

        _entry(top, "Search name / id", search, 0, 0, width=24)
        tk.Button(top, text="Search", command=lambda: self._fill_with_headers(
            lb, headers, backend.customer_rows(backend.filter_customers(cache["customers"], search.get())))
        ).grid(row=0, column=2, padx=6)
        tk.Button(top, text="Refresh", command=lambda: self._load(win, lb, headers, fetch, "customers")
                  ).grid(row=0, column=3, padx=6)

        _sep(top, 1)
        labels = [("ho_ten", "Full name"), ("ten_dang_nhap", "Username"), ("mat_khau", "Password"),
                  ("so_dien_thoai", "Phone"), ("email", "Email"), ("ngay_sinh", "Birth date"),
                  ("dia_chi", "Address"), ("ma_bao_hiem", "Insurance no.")]
        form = {k: tk.StringVar() for k, _ in labels}
        form["gioi_tinh"] = tk.StringVar()
        for i, (key, label) in enumerate(labels):
            _entry(top, label, form[key], 2 + i // 4, (i % 4) * 2, show="*" if key == "mat_khau" else None)
        _combo(top, "Gender", form["gioi_tinh"], login_backend.GENDERS, 4, 0, width=14)

        def create():
            backend.save_customer({k: v.get() for k, v in form.items()}, "create")
            for v in form.values():
                v.set("")

        tk.Button(top, text="Add customer", command=lambda: self._add(create, lb, fetch, headers, "Customer created")
                  ).grid(row=4, column=2, padx=6)

        _sep(top, 5)
        doctors = self._safe(backend.all_doctors, [], "doctors")
        doctor_by_name = {f"{d.get('ho_ten')} ({backend.doctor_id(d)})": backend.doctor_id(d) for d in doctors}
        clinic_by_name = {f"{c.get('ten_phong_kham')} ({c.get('ma_phong_kham')})": c.get("ma_phong_kham")
                          for c in backend.clinics_or_default()}
        b_customer = tk.StringVar(); b_doctor = tk.StringVar(); b_clinic = tk.StringVar()
        b_date = tk.StringVar(); b_time = tk.StringVar()
        _entry(top, "Book for customer id", b_customer, 6, 0)
        _combo(top, "Doctor", b_doctor, doctor_by_name, 6, 2, width=24)
        _combo(top, "Clinic", b_clinic, clinic_by_name, 6, 4, width=24)
        _entry(top, "Date", b_date, 7, 0, width=12)
        _combo(top, "Time", b_time, backend.TIME_SLOT_OPTIONS, 7, 2, width=8)

        def book():
            try:
                backend.book_for_customer(b_customer.get().strip(), doctor_by_name.get(b_doctor.get(), ""),
                                          b_date.get().strip(), b_time.get(), clinic_by_name.get(b_clinic.get()))
            except UI_ERRORS as e:
                messagebox.showerror("Booking failed", str(e), parent=win)
                return
            messagebox.showinfo("Booked", "Appointment booked successfully", parent=win)

        tk.Button(top, text="Book", command=book).grid(row=7, column=4, padx=6)

        self._load(win, lb, headers, fetch, "customers")

    # ------------------ Receptionist: appointments ------------------
    def open_appointments(self):
        win, top, lb = self._make_page("Appointments", top_height=200)
        headers = ["id", "date", "time", "customer", "doctor", "clinic", "status", "notes"]
        cache = {"appts": []}

        search = tk.StringVar(); day = tk.StringVar(); status = tk.StringVar(value="all")
        doctor = tk.StringVar(value="all"); clinic = tk.StringVar(value="all")

        def to_rows(appts):
            out = []
            for a in appts:
                d, t = format_date_time(a.get("ngay_gio_kham"))
                out.append((a.get("ma_lich_kham"), d, t, a.get("ten_khach_hang"), a.get("ten_bac_si"),
                            a.get("ten_phong_kham"), a.get("trang_thai"), a.get("ghi_chu") or ""))
            return out

        def filtered():
            return to_rows(backend.filter_appointments(cache["appts"], search.get(), day.get().strip(),
                                                       status.get(), doctor.get(), clinic.get()))

        def fetch():
            cache["appts"] = backend.appointment_view()
            return filtered()

        _entry(top, "Search", search, 0, 0)
        _entry(top, "Date", day, 0, 2, width=12)
        _combo(top, "Status", status, ["all"] + list(backend.APPOINTMENT_STATUSES), 0, 4, width=12)
        _entry(top, "Doctor id", doctor, 1, 0)
        _entry(top, "Clinic id", clinic, 1, 2, width=12)
        tk.Button(top, text="Filter", command=lambda: self._fill_with_headers(lb, headers, filtered())
                  ).grid(row=1, column=4, padx=6)
        tk.Button(top, text="Refresh", command=lambda: self._load(win, lb, headers, fetch, "appointments")
                  ).grid(row=1, column=5, padx=6)

        _sep(top, 2)
        act_id = tk.StringVar()
        _entry(top, "Appointment id", act_id, 3, 0)
        tk.Button(top, text="Confirm", command=lambda: self._add(
            lambda: backend.confirm_appointment(act_id.get().strip()), lb, fetch, headers)).grid(row=3, column=2, padx=6)
        tk.Button(top, text="Cancel", command=lambda: self._add(
            lambda: backend.mark_cancelled(act_id.get().strip()), lb, fetch, headers)).grid(row=3, column=3, padx=6)

        edit = {k: tk.StringVar() for k in ("ngay_gio_kham", "trang_thai", "ghi_chu")}

        def load_for_edit():
            aid = act_id.get().strip()
            a = next((x for x in cache["appts"] if x.get("ma_lich_kham") == aid), None)
            if a is None:
                messagebox.showerror("Error", f"No appointment {aid}", parent=win)
                return
            for k, v in backend.edit_form(a).items():
                edit[k].set(v)

        tk.Button(top, text="Edit", command=load_for_edit).grid(row=3, column=4, padx=6)
        _entry(top, "Date/time", edit["ngay_gio_kham"], 4, 0)
        _combo(top, "Status", edit["trang_thai"], backend.APPOINTMENT_STATUSES, 4, 2, width=12)
        _entry(top, "Notes", edit["ghi_chu"], 4, 4, width=26)
        tk.Button(top, text="Save", command=lambda: self._add(
            lambda: backend.save_appointment_edit(act_id.get().strip(), {k: v.get() for k, v in edit.items()}),
            lb, fetch, headers, "Appointment updated")).grid(row=4, column=6, padx=6)

        self._load(win, lb, headers, fetch, "appointments")

    # ------------------ Receptionist: payments ------------------
    def open_payments(self):
        win, top, lb = self._make_page("Payments", top_height=200)
        headers = ["payment_id", "appointment_id", "patient", "amount", "method", "status", "paid_at"]
        state = {"page": 1, "payments": [], "pagination": {}}

        date_from = tk.StringVar(); date_to = tk.StringVar(); status = tk.StringVar(value="all")
        term = tk.StringVar()
        pages_lbl = tk.Label(top, text="")
        summary_lbl = tk.Label(top, text="", anchor="w")

        def fetch():
            payments, pagination = backend.payment_view(state["page"], config.PAYMENTS_PAGE_SIZE,
                                                        date_from.get().strip(), date_to.get().strip(), status.get())
            state["payments"], state["pagination"] = payments, pagination
            window = backend.page_window(pagination["page"], pagination["total_pages"])
            pages_lbl.config(text=" ".join(f"[{p}]" if p == pagination["page"] else str(p) for p in window)
                             + f"   ({pagination['total']} payments)")
            summary = self._safe(lambda: backend.payment_summary(date_from.get().strip(), date_to.get().strip()),
                                 {}, "payment summary")
            if summary:
                summary_lbl.config(text=f"Revenue {format_vnd(summary['tong_doanh_thu'])} | "
                                        f"Transactions {summary['so_giao_dich']} | "
                                        f"Cash {format_vnd(summary['tien_mat'])} | "
                                        f"Card {format_vnd(summary['the_ngan_hang'])}")
            return backend.payment_rows(backend.filter_payments(payments, term.get()))

        def go(delta):
            total = state["pagination"].get("total_pages") or 1
            state["page"] = min(max(1, state["page"] + delta), total)
            self._load(win, lb, headers, fetch, "payments")

        _entry(top, "From", date_from, 0, 0, width=12)
        _entry(top, "To", date_to, 0, 2, width=12)
        _combo(top, "Status", status, ["all"] + list(backend.PAYMENT_STATUSES), 0, 4, width=12)
        _entry(top, "Search", term, 0, 6)
        tk.Button(top, text="Apply", command=lambda: (state.update(page=1), self._load(win, lb, headers, fetch, "payments"))
                  ).grid(row=0, column=8, padx=6)
        tk.Button(top, text="< Prev", command=lambda: go(-1)).grid(row=1, column=0, padx=6)
        pages_lbl.grid(row=1, column=1, columnspan=4, sticky="w")
        tk.Button(top, text="Next >", command=lambda: go(1)).grid(row=1, column=5, padx=6)
        summary_lbl.grid(row=2, column=0, columnspan=9, sticky="w")

        _sep(top, 3)
        appt = tk.StringVar(); amount = tk.StringVar(); method = tk.StringVar(value=backend.PAYMENT_METHODS[0])
        _entry(top, "Appointment id", appt, 4, 0)
        _entry(top, "Amount (VND)", amount, 4, 2, width=12)
        _combo(top, "Method", method, backend.PAYMENT_METHODS, 4, 4, width=14)

        def create():
            backend.create_payment(appt.get().strip(), amount.get().strip(), method.get())
            appt.set("")
            amount.set("")

        tk.Button(top, text="Record payment", command=lambda: self._add(create, lb, fetch, headers, "Payment recorded")
                  ).grid(row=4, column=6, padx=6)

        self._load(win, lb, headers, fetch, "payments")

    # ------------------ Accountant ------------------
    def open_payroll(self):
        win, top, lb = self._make_page("Payroll Management")
        headers = ["id", "name", "role", "base", "bonus", "deductions", "net"]
        period = tk.StringVar(value="monthly")
        _combo(top, "View period", period, dashboards.PAYROLL_PERIODS, 0, 0, width=10)

        s = dashboards.payroll_summary()
        tk.Label(top, text=f"Staff {s['staff_count']} | Total payroll {s['total_payroll']:,} | "
                           f"Bonuses {s['total_bonuses']:,} | Deductions {s['total_deductions']:,}"
                 ).grid(row=1, column=0, columnspan=6, sticky="w", pady=4)

        def export():
            path = filedialog.asksaveasfilename(parent=win, defaultextension=".csv",
                                                initialfile=f"payroll_{period.get()}.csv",
                                                filetypes=[("CSV", "*.csv")])
            if not path:
                return
            try:
                dashboards.export_payroll_csv(path, period=period.get())
            except (OSError, ValueError) as e:
                messagebox.showerror("Export failed", str(e), parent=win)
                return
            messagebox.showinfo("Exported", f"{period.get().capitalize()} payroll saved to {path}", parent=win)

        tk.Button(top, text="Export Payroll", command=export).grid(row=0, column=2, padx=6)
        self._fill_with_headers(lb, headers, dashboards.payroll_rows())

    # ------------------ Manager ------------------
    def open_clinic_operations(self):
        win, top, lb = self._make_page("Clinic Operations")
        appt_headers = ["time", "doctor", "patient", "status"]
        sched_headers = ["doctor"] + list(dashboards.WEEKDAYS) + ["auto_assigned", "conflicts"]

        clinic_by_name = {c["name"]: c["id"] for c in dashboards.CLINICS}
        clinic = tk.StringVar(value=dashboards.clinic_name("clinic1"))
        _combo(top, "Select clinic", clinic, clinic_by_name, 0, 0, width=22)

        def show_appointments(*_):
            cid = clinic_by_name.get(clinic.get())
            self._fill_with_headers(lb, appt_headers, [(a["time"], a["doctor"], a["patient"], a["status"])
                                                       for a in dashboards.appointments_for(cid)])

        def show_schedules():
            self._fill_with_headers(lb, sched_headers, [
                tuple([s["doctor"]] + [s[d] for d in dashboards.WEEKDAYS]
                      + ["yes" if s["auto_assigned"] else "no", "CONFLICT" if s["conflicts"] else ""])
                for s in dashboards.DOCTOR_SCHEDULES])

        clinic.trace_add("write", show_appointments)
        tk.Button(top, text="Doctor schedules", command=show_schedules).grid(row=0, column=2, padx=6)
        conflicts = dashboards.doctors_with_conflicts()
        if conflicts:
            tk.Label(top, text="Schedule conflicts: " + ", ".join(conflicts), fg="#e74c3c").grid(
                row=1, column=0, columnspan=4, sticky="w")
        show_appointments()

    # ------------------ Executive ------------------
    def open_performance(self):
        win, top, lb = self._make_page("Performance Reports")
        headers = ["clinic", "appointments", "revenue", "utilization_%"]
        period = tk.StringVar(value="monthly")
        metrics = tk.Label(top, text="", anchor="w")

        def show(*_):
            d = dashboards.performance_for(period.get())
            metrics.config(text=f"Appointments {d['total_appointments']:,} | Revenue ${d['total_revenue']:,} | "
                                f"Doctor utilization {d['doctor_utilization']}% | "
                                f"Satisfaction {d['patient_satisfaction']}/5")
            totals = dashboards.network_totals()
            rows = [(c["name"], c["appointments"], c["revenue"], c["utilization"]) for c in dashboards.CLINIC_PERFORMANCE]
            rows.append(("Network", totals["appointments"], totals["revenue"], totals["utilization"]))
            self._fill_with_headers(lb, headers, rows)

        def export():
            path = filedialog.asksaveasfilename(parent=win, defaultextension=".csv",
                                                initialfile=f"performance_{period.get()}.csv",
                                                filetypes=[("CSV", "*.csv")])
            if not path:
                return
            try:
                dashboards.export_performance_csv(path, period.get())
            except (OSError, ValueError) as e:
                messagebox.showerror("Export failed", str(e), parent=win)
                return
            messagebox.showinfo("Exported", f"Report saved to {path}", parent=win)

        _combo(top, "Report period", period, dashboards.PERFORMANCE_DATA, 0, 0, width=12)
        tk.Button(top, text="Export Report", command=export).grid(row=0, column=2, padx=6)
        metrics.grid(row=1, column=0, columnspan=6, sticky="w", pady=4)
        period.trace_add("write", show)
        show()


def main():
    logging.basicConfig(level=config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    role = session.get_role() if session.load() else None
    while True:
        if role is None:
            role = LoginWindow().role
            if role is None:
                return
        app = MainInterface(role)
        if not app.logged_out:
            return
        role = None


if __name__ == "__main__":
    main()
