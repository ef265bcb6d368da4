import boto3
from typing import Optional, Dict, Any
from app.settings import settings
import logging

log = logging.getLogger(__name__)

# -------------------------
# DynamoDB Service (asset catalog)
# -------------------------
class DynamoDBService:
    def __init__(self):
        session = boto3.session.Session(region_name=settings.aws_region)
        kwargs = {
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
        }
        if settings.aws_endpoint_url:
            kwargs["endpoint_url"] = settings.aws_endpoint_url

        self.resource = session.resource("dynamodb", **kwargs)
        log.info("Initialized DynamoDB resource")

    def get_metadata(self, asset_id: str) -> Optional[Dict[str, Any]]:
        table = self.resource.Table(settings.dynamodb_table)
        resp = table.get_item(Key={"asset_id": asset_id})
        return resp.get("Item")

    def close(self):
        self.resource.meta.client.close()
        log.info("Closed DynamoDB resource")
