"""User-facing message strings shared by services and endpoints."""


class TierMessages:
    NOT_FOUND = "Membership tier not found"
    NAME_REQUIRED = "Membership tier name is required"
    NAME_TAKEN = "A membership tier with this name already exists"
    ADMIN_UNDELETABLE = "The admin tier cannot be deleted"
    ADMIN_RENAME = "The admin tier cannot be renamed"
    INVALID = "Invalid membership tier"


class CategoryMessages:
    NOT_FOUND = "Category not found"
    NAME_REQUIRED = "Category name is required"
    NAME_TAKEN = "A category with this name already exists"
    CONCURRENT_CREATE = "Another category was created at the same time; reload and retry"
    VIEW_REQUIRED = "View permission required for this category"
    EDIT_REQUIRED = "Edit permission required for this category"
    DELETE_REQUIRED = "Delete permission required for this category"
    PASSWORD_REQUIRED = "Password is required"


class ItemMessages:
    NOT_FOUND = "Item not found"


class PermissionMessages:
    IDS_REQUIRED = "Membership tier and category are required"
    INVALID_FIELD = "Permission field must be one of can_view, can_edit, can_delete"
    INVALID_TYPE = "Permission type must be one of view, edit, delete"
    CHECK_FAILED = "Permission check failed"
    CONCURRENT_UPSERT = "The permission was changed concurrently; reload and retry"


class ProfileMessages:
    NOT_FOUND = "Profile not found"
    EMAIL_REQUIRED = "Email is required"
    TIER_REQUIRED = "Membership tier name is required"
    NOTHING_TO_UPDATE = "Nothing to update"
    INVALID_TRANSITION = "Cannot change status from {current} to {target}"
    APPLICATION_CONFLICT = "An application for this email was submitted concurrently"
    IDENTITY_TAKEN = "This identity is already bound to another profile"
    APPLICATION_SUBMITTED = "Application submitted successfully"


class OrderingMessages:
    NEIGHBOR_MISSING = "Ordering is corrupted: expected neighbor is missing"
    ELEMENT_MISSING = "Element is not part of this collection"
    CONCURRENT_CHANGE = "The order changed while it was being updated; reload and retry"


class AnnouncementMessages:
    NOT_FOUND = "Announcement not found"
    FIELDS_REQUIRED = "Title and content are required"


class AuthMessages:
    INVALID_CREDENTIALS = "Could not validate credentials"
    INVALID_PAYLOAD = "Invalid token payload"
    ADMIN_REQUIRED = "Administrator privileges required"


class StoreMessages:
    FAILURE = "The data store is unavailable"
