"""
Unit tests for the staff back-office and the storefront API.

Tests:
- admin_dashboard and list actions are staff only
- dashboard tabs get a row editor or a JSON section editor
- order / contract status updates, subscription confirmation, feedback replies
- /api/catalog/save/: reconciliation, category refresh, 409 on stale data, 400 on bad payloads
- /api/upload/
- public API endpoints: contracts, plans, videos, feature feedback
"""
import shutil
import tempfile
import uuid

from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse

from docstore.registry import get_document_store

from storefront.services import subscriptions
from storefront.services.catalog.items import PRODUCTS, SLIDES, VIDEOS
from storefront.services.contracts import CONTRACTS
from storefront.services.features import FEATURES
from storefront.services.orders import ORDERS


class StaffTestBase(TestCase):

    def setUp(self):
        cache.clear()
        self.store = get_document_store()
        self.staff = User.objects.create_user(username='admin', email='admin@example.com', password='x',
                                              is_staff=True)
        self.customer = User.objects.create_user(username='client', email='client@example.com', password='x')


class DashboardTests(StaffTestBase):

    def test_customers_are_sent_to_login(self):
        self.client.force_login(self.customer)
        response = self.client.get(reverse('admin_dashboard'))
        self.assertEqual(response.status_code, 302)

    def test_staff_dashboard(self):
        self.store.set(PRODUCTS, 'p1', {'kind': 'shop', 'title': 'Savon', 'collection': 'soin-corporel'})
        self.client.force_login(self.staff)
        response = self.client.get(reverse('admin_dashboard'))
        self.assertEqual(response.status_code, 200)
        catalog = response.context['catalog']
        self.assertEqual([product['id'] for product in catalog['products']], ['p1'])
        self.assertEqual(catalog['revisions'][PRODUCTS], self.store.revision(PRODUCTS))

    def test_tabs_render(self):
        self.client.force_login(self.staff)
        for tab in ('orders', 'contracts', 'subscriptions', 'features'):
            response = self.client.get(reverse('admin_dashboard'), {'tab': tab})
            self.assertEqual(response.status_code, 200, tab)

    def test_row_editor_tabs(self):
        self.client.force_login(self.staff)
        for tab, section, kind in (('articles', 'products', 'article'), ('products', 'products', 'shop'),
                                   ('internet', 'products', 'internet'), ('tv', 'videos', ''),
                                   ('slides', 'slides', ''), ('payment', 'payment_methods', '')):
            response = self.client.get(reverse('admin_dashboard'), {'tab': tab})
            self.assertEqual(response.context['editor']['section'], section, tab)
            self.assertContains(response, f'data-collection="{section}" data-kind="{kind}"')
            self.assertContains(response, 'id="add-row"')
            self.assertContains(response, 'crypto.randomUUID()')

    @override_settings(MAX_PAYMENT_METHODS=3)
    def test_payment_editor_is_capped(self):
        self.client.force_login(self.staff)
        response = self.client.get(reverse('admin_dashboard'), {'tab': 'payment'})
        self.assertEqual(response.context['editor']['max_rows'], 3)
        response = self.client.get(reverse('admin_dashboard'), {'tab': 'slides'})
        self.assertIsNone(response.context['editor']['max_rows'])

    def test_json_section_tabs(self):
        self.client.force_login(self.staff)
        for tab, section in (('categories', 'categories'), ('subscription_prices', 'subscription_plans')):
            response = self.client.get(reverse('admin_dashboard'), {'tab': tab})
            self.assertIsNone(response.context['editor'])
            self.assertContains(response, f'id="section-editor" data-section="{section}"')

    def test_order_status(self):
        order_id = self.store.add(ORDERS, {'customer_name': 'Awa', 'status': 'pending'})
        self.client.force_login(self.staff)
        response = self.client.post(reverse('admin_order_status', args=[order_id]), {'status': 'completed'})
        self.assertRedirects(response, f"{reverse('admin_dashboard')}?tab=orders")
        self.assertEqual(self.store.get(ORDERS, order_id).get('status'), 'completed')

    def test_invalid_status_is_ignored(self):
        order_id = self.store.add(ORDERS, {'status': 'pending'})
        self.client.force_login(self.staff)
        self.client.post(reverse('admin_order_status', args=[order_id]), {'status': 'shipped'})
        self.assertEqual(self.store.get(ORDERS, order_id).get('status'), 'pending')

    def test_customer_cannot_delete_orders(self):
        order_id = self.store.add(ORDERS, {'status': 'pending'})
        self.client.force_login(self.customer)
        self.client.post(reverse('admin_order_delete', args=[order_id]))
        self.assertIsNotNone(self.store.get(ORDERS, order_id))

    def test_contract_delete(self):
        contract_id = self.store.add(CONTRACTS, {'name': 'Ndiaye', 'status': 'pending'})
        self.client.force_login(self.staff)
        self.client.post(reverse('admin_contract_delete', args=[contract_id]))
        self.assertIsNone(self.store.get(CONTRACTS, contract_id))

    def test_subscription_confirm(self):
        subscription_id = subscriptions.request_subscription(self.store, self.customer, '24h', 'Paiement reçu 1000')
        self.client.force_login(self.staff)
        response = self.client.post(reverse('admin_subscription_confirm', args=[subscription_id]))
        self.assertRedirects(response, f"{reverse('admin_dashboard')}?tab=subscriptions")
        self.assertEqual(
            self.store.get(subscriptions.SUBSCRIPTIONS, subscription_id).get('status'),
            subscriptions.STATUS_ACTIVE,
        )

    def test_feedback_reply(self):
        self.store.set(FEATURES, 'dark-mode', {'title': 'Mode sombre', 'feedback': [
            {'id': 'f1', 'text': 'Oui !'}, {'id': 'f2', 'text': 'Bof'},
        ]})
        self.client.force_login(self.staff)
        self.client.post(reverse('admin_feedback_reply', args=['dark-mode', 'f2']), {'reply': 'Merci'})
        feedback = self.store.get(FEATURES, 'dark-mode').get('feedback')
        self.assertNotIn('admin_reply', feedback[0])
        self.assertEqual(feedback[1]['admin_reply'], 'Merci')


class CatalogSaveApiTests(StaffTestBase):

    def setUp(self):
        super().setUp()
        self.url = reverse('api-catalog-save')
        self.store.set(PRODUCTS, 'old', {'kind': 'article', 'title': 'Ancien'})

    def payload(self, **extra):
        data = {
            'products': [
                {'id': 'p1', 'title': 'Savon', 'price': 2500, 'collection': 'soin-corporel'},
                {'id': 'a1', 'kind': 'article', 'title': 'Blog', 'article_category': 'web', 'original_price': None},
            ],
            'slides': [{'id': 's1', 'title': 'Bienvenue'}],
            'videos': [],
        }
        data.update(extra)
        return data

    def test_requires_staff(self):
        self.client.force_login(self.customer)
        response = self.client.post(self.url, self.payload(), content_type='application/json')
        self.assertEqual(response.status_code, 403)
        self.assertIn('error', response.json())
        self.assertIsNotNone(self.store.get(PRODUCTS, 'old'))

    def test_save_with_generated_ids(self):
        """Rows added on the dashboard carry browser-generated UUIDs."""
        product_id, slide_id = str(uuid.uuid4()), str(uuid.uuid4())
        self.client.force_login(self.staff)
        response = self.client.post(self.url, self.payload(
            products=[{'id': product_id, 'kind': 'internet', 'title': 'Fibre', 'internet_class': 'box'}],
            slides=[{'id': slide_id, 'title': 'Promo'}],
        ), content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.store.get(PRODUCTS, product_id).get('kind'), 'internet')
        self.assertIsNone(self.store.get(PRODUCTS, 'old'))
        self.assertIsNotNone(self.store.get(SLIDES, slide_id))

    def test_save_reconciles(self):
        self.client.force_login(self.staff)
        response = self.client.post(self.url, self.payload(), content_type='application/json')

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['deleted'][PRODUCTS], ['old'])
        self.assertEqual(body['revisions'][PRODUCTS], self.store.revision(PRODUCTS))
        self.assertEqual({doc.id for doc in self.store.list(PRODUCTS)}, {'p1', 'a1'})
        self.assertEqual(self.store.get(PRODUCTS, 'p1').get('kind'), 'shop')
        self.assertNotIn('original_price', self.store.get(PRODUCTS, 'a1').data)
        self.assertEqual([doc.id for doc in self.store.list(SLIDES)], ['s1'])

    def test_save_refreshes_categories(self):
        self.client.force_login(self.staff)
        self.client.get(reverse('home'))
        categories = {'tv_channels': [{'id': 'sport', 'label': 'Sport'}]}
        self.client.post(self.url, self.payload(categories=categories), content_type='application/json')

        response = self.client.get(reverse('api-config-categories'))
        self.assertEqual(response.json()['tv_channels'], [{'id': 'sport', 'label': 'Sport'}])

    def test_stale_dashboard_gets_conflict(self):
        loaded_at = self.store.revision(PRODUCTS)
        self.store.set(PRODUCTS, 'new-elsewhere', {'kind': 'article', 'title': 'Nouveau'})
        self.client.force_login(self.staff)

        response = self.client.post(self.url, self.payload(revisions={PRODUCTS: loaded_at}),
                                    content_type='application/json')

        self.assertEqual(response.status_code, 409)
        details = response.json()['details']
        self.assertEqual(details['collection'], PRODUCTS)
        self.assertEqual(details['expected'], loaded_at)
        self.assertIsNotNone(self.store.get(PRODUCTS, 'new-elsewhere'))

    def test_duplicate_ids(self):
        self.client.force_login(self.staff)
        payload = self.payload(slides=[{'id': 's1'}, {'id': 's1'}])
        response = self.client.post(self.url, payload, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('slides', response.json()['details'])
        self.assertIsNotNone(self.store.get(PRODUCTS, 'old'))

    @override_settings(MAX_PAYMENT_METHODS=3)
    def test_too_many_payment_methods(self):
        self.client.force_login(self.staff)
        methods = [{'id': str(i), 'name': f'M{i}'} for i in range(4)]
        response = self.client.post(self.url, self.payload(payment_methods=methods), content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('payment_methods', response.json()['details'])

    def test_current_revisions(self):
        self.client.force_login(self.staff)
        response = self.client.get(self.url)
        self.assertEqual(set(response.json()['revisions']), {PRODUCTS, SLIDES, VIDEOS})


class UploadApiTests(StaffTestBase):

    def setUp(self):
        super().setUp()
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)

    def test_missing_file(self):
        self.client.force_login(self.staff)
        response = self.client.post(reverse('api-upload'), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Aucun fichier fourni.')

    def test_upload_returns_url(self):
        self.client.force_login(self.staff)
        upload = SimpleUploadedFile('ma photo.jpg', b'fake-image', content_type='image/jpeg')
        with self.settings(MEDIA_ROOT=self.media_root):
            response = self.client.post(reverse('api-upload'), {'file': upload})
        self.assertEqual(response.status_code, 200)
        url = response.json()['url']
        self.assertTrue(url.startswith('/media/uploads/'))
        self.assertTrue(url.endswith('-ma_photo.jpg'))


class PublicApiTests(StaffTestBase):

    def test_contract_submission(self):
        response = self.client.post(reverse('api-contract-list'), {
            'name': 'Ndiaye', 'firstname': 'Aminata', 'email': 'aminata@example.com',
            'phone': '770000000', 'reason': 'Partenariat boutique',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        contract = self.store.get(CONTRACTS, response.json()['id'])
        self.assertEqual(contract.get('status'), 'pending')

    def test_contract_missing_field(self):
        response = self.client.post(reverse('api-contract-list'), {'name': 'Ndiaye'}, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.json()['details'])

    def test_contract_list_is_staff_only(self):
        self.assertEqual(self.client.get(reverse('api-contract-list')).status_code, 403)

    def test_plans(self):
        response = self.client.get(reverse('api-config-plans'))
        self.assertEqual(response.json()['1m']['price'], 15000)

    def test_paid_video_src_is_hidden(self):
        self.store.set(VIDEOS, 'paid', {'title': 'Premium', 'is_paid': True, 'src': 'https://cdn.example.com/v.mp4'})
        response = self.client.get(reverse('api-video-detail', args=['paid']))
        self.assertNotIn('src', response.json())
        self.assertFalse(response.json()['has_access'])

    def test_feedback_requires_login(self):
        self.store.set(FEATURES, 'dark-mode', {'title': 'Mode sombre'})
        url = reverse('api-feature-feedback', args=['dark-mode'])
        self.assertEqual(self.client.post(url, {'text': 'Oui'}, content_type='application/json').status_code, 403)

        self.client.force_login(self.customer)
        response = self.client.post(url, {'text': 'Oui'}, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        feedback = self.store.get(FEATURES, 'dark-mode').get('feedback')
        self.assertEqual(feedback[0]['author_email'], 'client@example.com')

    def test_feedback_on_missing_feature(self):
        self.client.force_login(self.customer)
        response = self.client.post(reverse('api-feature-feedback', args=['nope']), {'text': 'Oui'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 404)
