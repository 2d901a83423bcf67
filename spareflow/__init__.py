"""SpareFlow spare-parts logistics API."""
