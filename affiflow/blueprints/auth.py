"""Authentication blueprint: sign-in, sign-up and sign-out pages."""

from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import login_user, logout_user
from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email, EqualTo, Length

from affiflow.auth import authenticate, forget_principal, register_user, remember_principal
from affiflow.errors import AuthenticationError, ConflictError, ValidationError
from affiflow.extensions import db, limiter
from affiflow.models import User
from affiflow.security.config import auth_rate_limit


class SignInForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])


class SignUpForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=100)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
    password_confirm = PasswordField(
        "Confirm Password",
        validators=[DataRequired(), EqualTo('password', message="Passwords must match")],
    )


auth_bp = Blueprint("auth", __name__)


def _safe_next() -> str | None:
    next_url = request.args.get("next")
    if next_url and next_url.startswith('/') and not next_url.startswith('//'):
        return next_url
    return None


@auth_bp.route("/signin", methods=["GET", "POST"])
@limiter.limit(auth_rate_limit, methods=["POST"])
def signin():
    form = SignInForm()
    if form.validate_on_submit():
        try:
            principal = authenticate(db.session, form.email.data, form.password.data)
        except AuthenticationError:
            flash("Invalid email or password", "error")
            return render_template("signin.html", form=form), 401

        user = db.session.get(User, principal.id)
        login_user(user)
        remember_principal(principal)
        return redirect(_safe_next() or url_for("public.dashboard"))

    return render_template("signin.html", form=form)


@auth_bp.route("/signup", methods=["GET", "POST"])
@limiter.limit(auth_rate_limit, methods=["POST"])
def signup():
    form = SignUpForm()
    if form.validate_on_submit():
        try:
            register_user(db.session, form.name.data, form.email.data, form.password.data)
        except (ConflictError, ValidationError) as exc:
            flash(exc.message, "error")
            return render_template("signup.html", form=form), 400

        flash("Account created. Please sign in.", "success")
        return redirect(url_for("auth.signin"))

    return render_template("signup.html", form=form)


@auth_bp.route("/signout", methods=["GET", "POST"])
def signout():
    forget_principal()
    logout_user()
    flash("You have been signed out", "info")
    return redirect(url_for("auth.signin"))


__all__ = ["auth_bp"]
