"""
Job list payload - joblist.json 响应的 pydantic 模型

只有 encryptJobId 和 securityId 是必需的；展示字段缺失或为 null 时按空串渲染。
"""

from typing import Any, List, Optional
from datetime import datetime, timezone
import json

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..exceptions import PayloadDecodeError
from .job import DraftRecord

JOB_DETAIL_URL = "https://www.zhipin.com/job_detail/{job_id}.html?lid={lid}&securityId={security_id}&sessionId="


class ZhipinJob(BaseModel):
    encrypt_job_id: str = Field(alias="encryptJobId")
    security_id: str = Field(alias="securityId")
    lid: Optional[str] = None
    job_name: Optional[str] = Field(default=None, alias="jobName")
    salary_desc: Optional[str] = Field(default=None, alias="salaryDesc")
    job_labels: List[str] = Field(default_factory=list, alias="jobLabels")
    brand_name: Optional[str] = Field(default=None, alias="brandName")
    area_district: Optional[str] = Field(default=None, alias="areaDistrict")
    business_district: Optional[str] = Field(default=None, alias="businessDistrict")
    brand_scale_name: Optional[str] = Field(default=None, alias="brandScaleName")
    brand_stage_name: Optional[str] = Field(default=None, alias="brandStageName")
    brand_logo: Optional[str] = Field(default=None, alias="brandLogo")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("job_labels", mode="before")
    @classmethod
    def _labels_or_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [label for label in value if label is not None]
        return value

    def to_draft(self, captured_at: Optional[datetime] = None) -> DraftRecord:
        """Project the API entry into a feed-ready draft record."""
        return DraftRecord(
            title=f"{self.job_name or ''} | {self.salary_desc or ''} | {','.join(self.job_labels)}",
            author=(
                f"{self.brand_name or ''} / {self.area_district or ''} {self.business_district or ''} / "
                f"{self.brand_scale_name or ''} / {self.brand_stage_name or ''}"
            ),
            link=JOB_DETAIL_URL.format(job_id=self.encrypt_job_id, lid=self.lid or "", security_id=self.security_id),
            pub_date=captured_at or datetime.now(timezone.utc),
            guid=self.security_id,
            image_url=self.brand_logo,
        )


class ZpData(BaseModel):
    job_list: List[ZhipinJob] = Field(default_factory=list, alias="jobList")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class JobListPayload(BaseModel):
    zp_data: ZpData = Field(alias="zpData")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


def load_job_list(raw_payload: Any, url: str = "") -> JobListPayload:
    """Decode and validate a ``joblist.json`` response body.

    Accepts bytes, str, or an already-parsed mapping. Any decode or schema
    failure is raised as ``PayloadDecodeError``.
    """

    if isinstance(raw_payload, (bytes, bytearray)):
        try:
            raw_payload = raw_payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PayloadDecodeError(f"job list payload is not utf-8: {exc}", url=url) from exc

    if isinstance(raw_payload, str):
        try:
            data = json.loads(raw_payload)
        except json.JSONDecodeError as exc:
            raise PayloadDecodeError(f"job list payload was not valid JSON: {exc}", url=url) from exc
    else:
        data = raw_payload

    try:
        return JobListPayload.model_validate(data)
    except ValidationError as exc:
        raise PayloadDecodeError(f"job list payload failed validation: {exc}", url=url) from exc


def json_to_drafts(raw_payload: Any, url: str = "", captured_at: Optional[datetime] = None) -> List[DraftRecord]:
    """Decode a response body straight into draft records, in payload order."""

    payload = load_job_list(raw_payload, url=url)
    captured_at = captured_at or datetime.now(timezone.utc)
    return [job.to_draft(captured_at) for job in payload.zp_data.job_list]
