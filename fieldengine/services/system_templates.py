"""Built-in field templates seeded for the core back-office modules."""
from __future__ import annotations

from typing import Any

SYSTEM_TEMPLATES: list[dict[str, Any]] = [
    {
        "name_en": "Real Estate Basics",
        "name_ar": "أساسيات العقارات",
        "description_en": "Essential real estate property fields",
        "description_ar": "حقول العقارات الأساسية",
        "module": "properties",
        "fields": [
            {
                "field_key": "property_manager",
                "label_en": "Property Manager",
                "label_ar": "مدير العقار",
                "field_type": "text",
                "is_required": False,
                "show_in_admin": True,
                "show_in_user_form": False,
            },
            {
                "field_key": "maintenance_fee",
                "label_en": "Monthly Maintenance Fee",
                "label_ar": "رسوم الصيانة الشهرية",
                "field_type": "number",
                "is_required": False,
                "show_in_admin": True,
                "show_in_user_form": True,
                "placeholder_en": "Enter amount in cents",
                "placeholder_ar": "أدخل المبلغ بالسنت",
                "validation_rules": [{"type": "minValue", "value": 0}],
            },
            {
                "field_key": "insurance_provider",
                "label_en": "Insurance Provider",
                "label_ar": "مزود التأمين",
                "field_type": "text",
                "is_required": False,
                "show_in_admin": True,
                "show_in_user_form": False,
            },
            {
                "field_key": "property_country",
                "label_en": "Property Country",
                "label_ar": "دولة العقار",
                "field_type": "country",
                "is_required": True,
                "show_in_admin": True,
                "show_in_user_form": True,
            },
        ],
    },
    {
        "name_en": "KYC Extended",
        "name_ar": "معرفة العميل الموسعة",
        "description_en": "Extended KYC fields for user verification",
        "description_ar": "حقول معرفة العميل الموسعة للتحقق من المستخدم",
        "module": "users",
        "fields": [
            {
                "field_key": "passport_number",
                "label_en": "Passport Number",
                "label_ar": "رقم جواز السفر",
                "field_type": "text",
                "is_required": True,
                "show_in_admin": True,
                "show_in_user_form": True,
            },
            {
                "field_key": "passport_expiry",
                "label_en": "Passport Expiry Date",
                "label_ar": "تاريخ انتهاء جواز السفر",
                "field_type": "date",
                "is_required": True,
                "show_in_admin": True,
                "show_in_user_form": True,
            },
            {
                "field_key": "nationality",
                "label_en": "Nationality",
                "label_ar": "الجنسية",
                "field_type": "country",
                "is_required": True,
                "show_in_admin": True,
                "show_in_user_form": True,
            },
            {
                "field_key": "tax_id",
                "label_en": "Tax ID Number",
                "label_ar": "الرقم الضريبي",
                "field_type": "text",
                "is_required": False,
                "show_in_admin": True,
                "show_in_user_form": True,
            },
            {
                "field_key": "employment_status",
                "label_en": "Employment Status",
                "label_ar": "حالة التوظيف",
                "field_type": "dropdown",
                "config": {
                    "options": [
                        {"value": "employed", "label": "Employed"},
                        {"value": "self_employed", "label": "Self Employed"},
                        {"value": "unemployed", "label": "Unemployed"},
                        {"value": "retired", "label": "Retired"},
                    ]
                },
                "is_required": True,
                "show_in_admin": True,
                "show_in_user_form": True,
            },
        ],
    },
    {
        "name_en": "Lead Qualification",
        "name_ar": "تأهيل العملاء المحتملين",
        "description_en": "Fields for qualifying CRM leads",
        "description_ar": "حقول لتأهيل العملاء المحتملين في CRM",
        "module": "leads",
        "fields": [
            {
                "field_key": "lead_source",
                "label_en": "Lead Source",
                "label_ar": "مصدر العميل المحتمل",
                "field_type": "dropdown",
                "config": {
                    "options": [
                        {"value": "website", "label": "Website"},
                        {"value": "referral", "label": "Referral"},
                        {"value": "social_media", "label": "Social Media"},
                        {"value": "event", "label": "Event"},
                        {"value": "other", "label": "Other"},
                    ]
                },
                "is_required": True,
                "show_in_admin": True,
                "show_in_user_form": False,
            },
            {
                "field_key": "budget_range",
                "label_en": "Budget Range",
                "label_ar": "نطاق الميزانية",
                "field_type": "dropdown",
                "config": {
                    "options": [
                        {"value": "under_50k", "label": "Under $50,000"},
                        {"value": "50k_100k", "label": "$50,000 - $100,000"},
                        {"value": "100k_250k", "label": "$100,000 - $250,000"},
                        {"value": "250k_500k", "label": "$250,000 - $500,000"},
                        {"value": "over_500k", "label": "Over $500,000"},
                    ]
                },
                "is_required": False,
                "show_in_admin": True,
                "show_in_user_form": False,
            },
            {
                "field_key": "investment_timeline",
                "label_en": "Investment Timeline",
                "label_ar": "الجدول الزمني للاستثمار",
                "field_type": "dropdown",
                "config": {
                    "options": [
                        {"value": "immediate", "label": "Immediate (0-3 months)"},
                        {"value": "short_term", "label": "Short Term (3-6 months)"},
                        {"value": "medium_term", "label": "Medium Term (6-12 months)"},
                        {"value": "long_term", "label": "Long Term (12+ months)"},
                    ]
                },
                "is_required": False,
                "show_in_admin": True,
                "show_in_user_form": False,
            },
        ],
    },
]
