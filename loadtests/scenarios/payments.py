"""Payments load test scenarios.

Only the redirect leg can be driven from here: the return leg needs a
signature from the gateway's merchant secret.
"""

from locust import SequentialTaskSet, task

from loadtests.data_generators import load_variants, payment_url_data, user_id
from loadtests.helpers.response import extract_error_detail


class PaymentRedirectJourney(SequentialTaskSet):
    """Price a basket and build the signed gateway URL."""

    @task
    def build_payment_url(self):
        variants = load_variants(self.client)
        if not variants:
            self.interrupt()
        with self.client.post(
            "/payments/vnpay/url",
            json=payment_url_data(variants, user_id()),
            catch_response=True,
            name="POST /payments/vnpay/url",
        ) as resp:
            if resp.status_code == 200 and "vnp_SecureHash=" in resp.json()["payment_url"]:
                resp.success()
            elif resp.status_code == 409:
                resp.success()
            else:
                resp.failure(f"Payment URL failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()
