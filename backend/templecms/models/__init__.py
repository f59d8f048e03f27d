from templecms.models.bank_details import BankDetails, CategoryBankDetails, EventBankDetails
from templecms.models.blog_post import BlogPost
from templecms.models.contact_message import ContactMessage
from templecms.models.content import (
    Banner,
    GalleryItem,
    LiveVideo,
    Quote,
    Schedule,
    SocialLink,
    Stat,
    Testimonial,
    Video,
)
from templecms.models.donation import Donation
from templecms.models.donation_category import DonationCard, DonationCategory
from templecms.models.event import Event, EventDonationCard
from templecms.models.media_asset import MediaAsset
from templecms.models.subscription import Subscription
from templecms.models.user import User

__all__ = [
    "BankDetails",
    "Banner",
    "BlogPost",
    "CategoryBankDetails",
    "ContactMessage",
    "Donation",
    "DonationCard",
    "DonationCategory",
    "Event",
    "EventBankDetails",
    "EventDonationCard",
    "GalleryItem",
    "LiveVideo",
    "MediaAsset",
    "Quote",
    "Schedule",
    "SocialLink",
    "Stat",
    "Subscription",
    "Testimonial",
    "User",
    "Video",
]
