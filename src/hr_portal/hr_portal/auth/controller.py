from __future__ import annotations

import logging

from flask import Flask, flash, g, jsonify, redirect, render_template, request, session, url_for

from ..container import Container
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    DomainError,
    DuplicateUserError,
    IdentityProviderError,
    ValidationError,
)
from .context import AuthContext
from .decorators import auth_context, current_user, safe_next
from .guard import RouteAction, evaluate_route, home_path_for, is_public_path

logger = logging.getLogger(__name__)

PROVIDER_SESSION_KEY = "provider_session"


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_current_user():
        return {"current_user": current_user()}

    @app.before_request
    def open_auth_context():
        provider = container.identity_provider_factory()
        provider.restore(session.get(PROVIDER_SESSION_KEY))
        ctx = AuthContext(provider, container.users_repo)
        g.auth = ctx
        try:
            ctx.bootstrap()
        except DomainError:
            logger.exception("Session bootstrap failed; continuing signed out")

        if is_public_path(request.path):
            return None

        decision = evaluate_route(ctx.user, request.path, loading=ctx.loading)
        if decision.action == RouteAction.WAIT:
            return render_template("loading.html"), 503
        if decision.action == RouteAction.REDIRECT:
            if request.path.startswith("/api/"):
                return jsonify({"error": "unauthorized"}), 401
            if ctx.user is None:
                return redirect(url_for("login", next=request.full_path.rstrip("?")))
            return redirect(decision.location)
        return None

    @app.after_request
    def persist_provider_session(response):
        ctx = auth_context()
        if ctx is None:
            return response
        exported = ctx.provider.export_session() if ctx.user is not None else None
        if exported:
            session[PROVIDER_SESSION_KEY] = exported
        else:
            session.pop(PROVIDER_SESSION_KEY, None)
        return response

    @app.teardown_request
    def close_auth_context(exc):
        ctx = g.pop("auth", None)
        if ctx is not None:
            ctx.close()

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    def login():
        ctx = auth_context()
        if ctx.user is not None:
            return redirect(home_path_for(ctx.user.role))

        error = None
        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                user = ctx.login(email, password)
                session.permanent = bool(remember)
                flash(f"Welcome back, {user.full_name}!", "success")
                return redirect(safe_next(request.args.get("next")) or home_path_for(user.role))
            except AuthenticationError as e:
                error = str(e)
            except IdentityProviderError as e:
                logger.warning("Login blocked by identity provider: %s", e)
                flash("Sign-in service is unavailable. Please try again.", "danger")
            except Exception as e:
                logger.exception("Unexpected error during login")
                if bool(app.config.get("DEBUG", False)):
                    flash(f"System error while signing in: {e}", "danger")
                else:
                    flash("System error while signing in", "danger")

        return render_template("login.html", error=error, email=request.form.get("email", ""))

    @app.route("/register", methods=["GET", "POST"], endpoint="register")
    def register_account():
        ctx = auth_context()
        if ctx.user is not None:
            return redirect(home_path_for(ctx.user.role))

        error = None
        form = request.form
        if request.method == "POST":
            try:
                user = ctx.register(
                    email=form.get("email", ""),
                    password=form.get("password", ""),
                    full_name=form.get("full_name", ""),
                    role=form.get("role", Role.EMPLOYEE.value),
                    confirm_password=form.get("confirm_password", ""),
                )
                flash("Account created successfully!", "success")
                return redirect(home_path_for(user.role))
            except (ValidationError, DuplicateUserError) as e:
                error = str(e)
            except Exception:
                logger.exception("Unexpected error during registration")
                flash("Registration failed. Please try again.", "danger")

        return render_template("register.html", error=error, form=form, roles=list(Role))

    @app.route("/logout", endpoint="logout")
    def logout():
        ctx = auth_context()
        try:
            ctx.logout()
        except IdentityProviderError as e:
            logger.warning("Provider sign-out failed: %s", e)
        session.clear()
        flash("You have been signed out.", "info")
        return redirect(url_for("login"))
