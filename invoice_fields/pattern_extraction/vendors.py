"""
Known vendor and category tables.

KNOWN_VENDORS is ordered: when several vendors match with the same
confidence, the one listed first wins.
"""

from typing import Dict, List, Tuple

KNOWN_VENDORS: List[str] = [
    'AWS',
    'Amazon Web Services',
    'Microsoft Azure',
    'Google Cloud',
    'GCP',
    'GitHub',
    'GitLab',
    'Stripe',
    'PayPal',
    'SendGrid',
    'Twilio',
    'MongoDB',
    'PostgreSQL',
    'MySQL',
    'Redis',
    'Elasticsearch',
    'Slack',
    'Discord',
    'Microsoft Teams',
    'Zoom',
    'ChatGPT',
    'OpenAI',
    'Anthropic',
    'Claude',
    'Orchids',
    'Cursor',
    'Figma',
    'Adobe',
    'Canva',
    'Notion',
    'Airtable',
    'Salesforce',
    'HubSpot',
    'Zendesk',
    'Intercom',
    'Vercel',
    'Netlify',
    'Heroku',
    'DigitalOcean',
    'Linode',
    'Cloudflare',
    'Fastly',
    'Akamai',
    'Datadog',
    'New Relic',
    'Sentry',
    'LogRocket',
    'Mixpanel',
    'Amplitude',
    'Segment',
]

# Matched as a case-insensitive substring of the resolved provider
PROVIDER_CATEGORIES: Dict[str, str] = {
    'AWS': 'Cloud Services',
    'Amazon Web Services': 'Cloud Services',
    'Microsoft Azure': 'Cloud Services',
    'Google Cloud': 'Cloud Services',
    'GCP': 'Cloud Services',
    'GitHub': 'Development Tools',
    'GitLab': 'Development Tools',
    'ChatGPT': 'AI Tools',
    'OpenAI': 'AI Tools',
    'Anthropic': 'AI Tools',
    'Claude': 'AI Tools',
    'Orchids': 'AI Tools',
    'Cursor': 'Development Tools',
    'GitHub Copilot': 'Development Tools',
    'Stripe': 'Payment Processing',
    'PayPal': 'Payment Processing',
    'SendGrid': 'Email Services',
    'Twilio': 'Communication',
    'Slack': 'Communication',
    'Discord': 'Communication',
    'MongoDB': 'Database Services',
    'PostgreSQL': 'Database Services',
    'MySQL': 'Database Services',
    'Figma': 'Design Tools',
    'Adobe': 'Design Tools',
    'Canva': 'Design Tools',
}

# Keyword sets scanned on word boundaries when no provider mapping applies
CATEGORY_KEYWORDS: List[Tuple[str, List[str]]] = [
    ('Cloud Services', ['cloud', 'aws', 'azure', 'gcp', 'infrastructure']),
    ('Development Tools', ['development', 'devops', 'ci-cd', 'github', 'gitlab']),
    ('AI Tools', ['ai', 'artificial intelligence', 'machine learning', 'ml']),
    ('Payment Processing', ['payment', 'stripe', 'paypal', 'billing']),
    ('Email Services', ['email', 'sendgrid', 'mail']),
    ('Communication', ['slack', 'discord', 'messaging', 'chat']),
    ('Database Services', ['database', 'db', 'mongodb', 'postgresql']),
    ('Design Tools', ['design', 'figma', 'adobe', 'creative']),
]
