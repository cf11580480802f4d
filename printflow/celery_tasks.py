import traceback
from printflow.extensions import celery_app
from printflow.services.discount_service import DiscountService

@celery_app.task(bind=True)
def task_deactivate_expired_codes(self):
    """Switch off every discount code whose expiration date has passed."""
    with self.app.flask_app.app_context():
        try:
            count = DiscountService.deactivate_expired()
            self.app.flask_app.logger.info(f"Deactivated {count} expired discount code(s)")
            return {'status': 'completed', 'result': {'deactivated': count,
                                                      'message': f'{count} expired code(s) deactivated.'}}
        except Exception as e:
            traceback.print_exc()
            return {'status': 'error', 'message': str(e)}
