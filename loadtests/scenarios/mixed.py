"""Mixed workload scenario.

Combines the ordering and payment journeys with weights that model a
storefront where most traffic browses and places orders, and a smaller
share cancels or pays online. This is the recommended scenario for load
baseline testing.
"""

from locust import HttpUser, between

from loadtests.scenarios.ordering import (
    CartToCheckoutJourney,
    OrderBrowsingJourney,
    OrderCancellationJourney,
    OrderFullLifecycleJourney,
)
from loadtests.scenarios.payments import PaymentRedirectJourney


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload.

    Weight distribution:
    - Order lifecycle (30%): place, deliver, view
    - Cart checkout (25%): staged cart converted to an order
    - Browsing (20%): admin order listings
    - Payment redirect (15%): priced and signed gateway URLs
    - Cancellation (10%): stock and voucher release under load
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        OrderFullLifecycleJourney: 6,
        CartToCheckoutJourney: 5,
        OrderBrowsingJourney: 4,
        PaymentRedirectJourney: 3,
        OrderCancellationJourney: 2,
    }
