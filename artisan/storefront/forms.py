from django import forms

from .services.orders import STATUSES
from .services.subscriptions import PLAN_IDS

INPUT_CLASS = "form-control"


class CheckoutForm(forms.Form):
    name = forms.CharField(
        label="Nom complet",
        min_length=2,
        max_length=150,
        widget=forms.TextInput(attrs={"class": INPUT_CLASS}),
        error_messages={"min_length": "Le nom doit contenir au moins 2 caractères."},
    )
    email = forms.EmailField(
        label="Email",
        widget=forms.EmailInput(attrs={"class": INPUT_CLASS}),
        error_messages={"invalid": "Adresse email invalide."},
    )
    phone = forms.CharField(
        label="Téléphone",
        min_length=8,
        max_length=30,
        widget=forms.TextInput(attrs={"class": INPUT_CLASS}),
        error_messages={"min_length": "Le numéro de téléphone semble trop court."},
    )
    transaction_id = forms.CharField(
        label="ID de transaction",
        min_length=4,
        max_length=100,
        widget=forms.TextInput(attrs={"class": INPUT_CLASS}),
        error_messages={"min_length": "L'ID de transaction est requis."},
    )
    notes = forms.CharField(
        label="Notes",
        required=False,
        max_length=1000,
        widget=forms.Textarea(attrs={"class": INPUT_CLASS, "rows": 3}),
    )

    def customer(self):
        data = self.cleaned_data
        return {
            'name': data['name'].strip(),
            'email': data['email'],
            'phone': data['phone'].strip(),
            'transaction_id': data['transaction_id'].strip(),
            'notes': data.get('notes', '').strip(),
        }


class SubscriptionForm(forms.Form):
    plan = forms.ChoiceField(choices=[(plan_id, plan_id) for plan_id in PLAN_IDS])
    transaction_id = forms.CharField(
        label="Message de transaction",
        min_length=10,
        max_length=500,
        widget=forms.Textarea(attrs={"class": INPUT_CLASS, "rows": 3}),
        error_messages={"min_length": "Veuillez coller le message de confirmation de transaction complet."},
    )


class ContractForm(forms.Form):
    name = forms.CharField(label="Nom", max_length=100)
    firstname = forms.CharField(label="Prénom", max_length=100)
    email = forms.EmailField(label="Email")
    phone = forms.CharField(label="Téléphone", max_length=30)
    reason = forms.CharField(label="Motif", widget=forms.Textarea(attrs={"rows": 4}))


class FeedbackForm(forms.Form):
    text = forms.CharField(label="Votre avis", max_length=2000, widget=forms.Textarea(attrs={"rows": 3}))

    def clean_text(self):
        text = self.cleaned_data['text'].strip()
        if not text:
            raise forms.ValidationError("Le message ne peut pas être vide.")
        return text


class ReplyForm(forms.Form):
    reply = forms.CharField(max_length=2000, widget=forms.Textarea(attrs={"rows": 2}))


class StatusForm(forms.Form):
    status = forms.ChoiceField(choices=[(status, status) for status in STATUSES])
