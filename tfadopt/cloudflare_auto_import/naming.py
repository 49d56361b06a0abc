CLOUDFLARE_STACK_ID = "cloudflare"


def full_domain_name(subdomain: str, domain: str) -> str:
    return f"{subdomain}.{domain}"


def access_app_name(subdomain: str, domain: str, environment: str) -> str:
    return f"{full_domain_name(subdomain, domain)} Access ({environment})"


def identity_provider_name(subdomain: str, domain: str) -> str:
    return f"Google IDP for {full_domain_name(subdomain, domain)}"


def access_policy_name(allowed_email_domain: str) -> str:
    return f"Allow {allowed_email_domain} domain"
