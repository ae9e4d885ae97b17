"""
Authentication views: login, register, logout and the profile page.
"""

import logging
import re

from django import forms
from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme

from docstore.exceptions import DocumentStoreError
from docstore.registry import get_document_store

from ..services.catalog.engagement_service import subscription_expiry
from ..social_pipeline import ensure_user_document

logger = logging.getLogger(__name__)


class LoginForm(forms.Form):
    username = forms.CharField(label="Identifiant", max_length=150)
    password = forms.CharField(label="Mot de passe", widget=forms.PasswordInput)


class RegisterForm(forms.Form):
    username = forms.CharField(label="Identifiant", max_length=150)
    email = forms.EmailField(label="Email")
    password1 = forms.CharField(label="Mot de passe", widget=forms.PasswordInput)
    password2 = forms.CharField(label="Confirmation", widget=forms.PasswordInput)

    def clean_username(self):
        username = self.cleaned_data.get('username', '')
        if len(username) < 3:
            raise ValidationError("L'identifiant doit contenir au moins 3 caractères.")
        if not re.match(r'^[a-zA-Z0-9._-]+$', username):
            raise ValidationError("Lettres latines, chiffres et ._- uniquement.")
        if User.objects.filter(username__iexact=username).exists():
            raise ValidationError("Cet identifiant est déjà utilisé.")
        return username

    def clean(self):
        data = super().clean()
        password1 = data.get("password1")
        password2 = data.get("password2")
        if password1 and password2:
            if password1 != password2:
                self.add_error("password2", "Les mots de passe ne correspondent pas.")
            else:
                try:
                    validate_password(password1)
                except ValidationError as exc:
                    self.add_error("password1", exc)
        return data


def _next_url(request):
    next_url = request.POST.get('next') or request.GET.get('next')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return next_url
    return None


def login_view(request):
    if request.user.is_authenticated:
        return redirect('profile')
    form = LoginForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        user = authenticate(
            request,
            username=form.cleaned_data['username'],
            password=form.cleaned_data['password'],
        )
        if user is None:
            form.add_error(None, "Identifiant ou mot de passe incorrect.")
        else:
            login(request, user)
            return redirect(_next_url(request) or 'home')
    return render(request, 'storefront/login.html', {'form': form, 'next': _next_url(request) or ''})


def register_view(request):
    if request.user.is_authenticated:
        return redirect('profile')
    form = RegisterForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        user = User.objects.create_user(
            username=form.cleaned_data['username'],
            email=form.cleaned_data['email'],
            password=form.cleaned_data['password1'],
        )
        ensure_user_document(user)
        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        logger.info("New account %s registered", user.pk)
        return redirect('home')
    return render(request, 'storefront/register.html', {'form': form})


def logout_view(request):
    logout(request)
    return redirect('home')


@login_required
def profile(request):
    try:
        expiry = subscription_expiry(get_document_store(), request.user)
    except DocumentStoreError as exc:
        logger.error("Subscription expiry for user %s failed to load: %s", request.user.pk, exc)
        messages.error(request, "Impossible de charger votre abonnement pour le moment.")
        expiry = None
    return render(request, 'storefront/profile.html', {'subscription_expiry': expiry})
