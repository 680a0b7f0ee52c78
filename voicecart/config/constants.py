"""
System Constants and Response Templates
Short, friendly messages suitable for reading aloud
"""

# Action Types
class ActionType:
    ADD = "add"
    REMOVE = "remove"
    SEARCH = "search"
    UPDATE = "update"
    CLEAR = "clear"
    UNKNOWN = "unknown"


# Category Labels
class Category:
    DAIRY = "Dairy"
    PRODUCE = "Produce"
    MEAT = "Meat"
    BAKERY = "Bakery"
    PANTRY = "Pantry"
    BEVERAGES = "Beverages"
    SNACKS = "Snacks"
    HOUSEHOLD = "Household"
    FROZEN = "Frozen"
    OTHER = "Other"


# Outcome error codes
class OutcomeError:
    PARSE_FAILURE = "parse_failure"
    NOT_FOUND = "not_found"
    STORE_FAILURE = "store_failure"
    SEARCH_FAILURE = "search_failure"
    TRANSCRIPT_ERROR = "transcript_error"


# Transcript error signals from the speech capture side
class TranscriptError:
    NO_SPEECH = "no-speech"
    NOT_ALLOWED = "not-allowed"
    AUDIO_CAPTURE = "audio-capture"
    NETWORK = "network"


# Voice Response Templates
class VoiceResponses:
    # Parsing
    DIDNT_UNDERSTAND = (
        "Sorry, I didn't understand \"{command}\". "
        "Try saying \"add milk to my list\" or \"find bread\"."
    )
    COULDNT_UNDERSTAND = "Sorry, I couldn't understand that. Please try again."

    # Add
    ITEM_ADDED = "Added {quantity} {name} to your list ({category})."
    QUANTITY_UPDATED = "Updated {name} quantity to {quantity}."
    ADD_FAILED = "Failed to add {name}. Please try again."

    # Remove
    ITEM_REMOVED = "Removed {name} from your list."
    ITEM_NOT_FOUND = "Item \"{name}\" not found in your list."
    REMOVE_FAILED = "Failed to remove {name}. Please try again."

    # Search
    SUGGESTIONS_FOUND = "Found {count} suggestions for \"{query}\"."
    LIST_MATCHES_FOUND = "Found {count} matching items in your list."
    NO_MATCHES = "No items found matching \"{query}\"."

    # List management
    LIST_LOAD_FAILED = "Failed to load shopping list."
    LIST_CLEARED = "Shopping list cleared successfully."
    CLEAR_FAILED = "Failed to clear shopping list."
    ITEM_UPDATED = "Updated {name}."
    UPDATE_FAILED = "Failed to update item."


# Log Event Types
class LogEventType:
    TRANSCRIPT_RECEIVED = "TRANSCRIPT_RECEIVED"
    TRANSCRIPT_ERROR = "TRANSCRIPT_ERROR"
    INTENT_DETECTED = "INTENT_DETECTED"
    PARSE_FAILED = "PARSE_FAILED"
    ITEM_ADDED = "ITEM_ADDED"
    ITEM_UPDATED = "ITEM_UPDATED"
    ITEM_REMOVED = "ITEM_REMOVED"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    SEARCH_COMPLETED = "SEARCH_COMPLETED"
    SEARCH_FALLBACK = "SEARCH_FALLBACK"
    STORE_FAILED = "STORE_FAILED"
